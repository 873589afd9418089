"""Testes da construção e validação semântica da base."""

import pytest

from expertsys.core import (
    IssueCode,
    KnowledgeBuilder,
    KnowledgeParser,
    NodeKind,
    ParseNode,
    ValidationError,
    load_knowledge_base,
)


def build(text):
    builder = KnowledgeBuilder()
    base = builder.build(KnowledgeParser().parse(text))
    return base, builder


class TestValidationErrors:
    def test_duplicate_rule_id(self):
        text = "1 если a-x то b-y\n1 если c-x то d-y"

        with pytest.raises(ValidationError) as exc_info:
            load_knowledge_base(text)

        assert exc_info.value.codes == [IssueCode.DUPLICATE_RULE_ID]
        assert exc_info.value.issues[0].rule_id == 1
        assert exc_info.value.issues[0].line == 2

    def test_rule_ids_compare_numerically(self):
        with pytest.raises(ValidationError) as exc_info:
            load_knowledge_base("01 если a-x то b-y\n1 если c-x то d-y")

        assert exc_info.value.codes == [IssueCode.DUPLICATE_RULE_ID]

    def test_duplicate_of_rejected_rule(self):
        text = "1 если a-x и a-y то b-z\n1 если c-x то d-y"

        with pytest.raises(ValidationError) as exc_info:
            load_knowledge_base(text)

        assert exc_info.value.codes == [
            IssueCode.CONTRADICTORY_CONDITIONS,
            IssueCode.DUPLICATE_RULE_ID,
        ]
        assert "primeira na linha 1" in exc_info.value.issues[1].message

    def test_contradictory_conditions(self):
        with pytest.raises(ValidationError) as exc_info:
            load_knowledge_base("1 если погода-дождь и погода-снег то действие-зонт")

        issue = exc_info.value.issues[0]
        assert issue.code == IssueCode.CONTRADICTORY_CONDITIONS
        assert issue.category == "погода"

    def test_self_reference(self):
        with pytest.raises(ValidationError) as exc_info:
            load_knowledge_base("1 если погода-дождь то погода-снег")

        assert exc_info.value.codes == [IssueCode.SELF_REFERENCE]

    @pytest.mark.parametrize("keyword,kind", [
        ("вопрос", "advice"),
        ("перевод", "translation"),
        ("подсказка", "tip"),
    ])
    def test_duplicate_binding(self, keyword, kind):
        text = f"1 если a-x то b-y\n{keyword} a Primeiro\n{keyword} a Segundo"

        with pytest.raises(ValidationError) as exc_info:
            load_knowledge_base(text)

        issue = exc_info.value.issues[0]
        assert issue.code == IssueCode.DUPLICATE_BINDING
        assert issue.kind == kind
        assert issue.line == 3

    def test_same_category_in_different_kinds_is_allowed(self):
        base = load_knowledge_base(
            "1 если a-x то b-y\nвопрос a Pergunta\nперевод a Rótulo\nподсказка a Dica"
        )

        assert base.question_for("a") == "Pergunta"
        assert base.translation_for("a") == "Rótulo"
        assert base.tip_for("a") == "Dica"

    def test_all_issues_are_reported(self):
        text = (
            "1 если a-x то b-y\n"
            "1 если a-x то c-y\n"
            "2 если d-x то d-y\n"
            "вопрос a Um\n"
            "вопрос a Dois\n"
        )

        with pytest.raises(ValidationError) as exc_info:
            load_knowledge_base(text)

        assert exc_info.value.codes == [
            IssueCode.DUPLICATE_RULE_ID,
            IssueCode.SELF_REFERENCE,
            IssueCode.DUPLICATE_BINDING,
        ]
        assert str(exc_info.value).startswith("3 inconsistência(s)")

    def test_malformed_token_in_node(self):
        node = ParseNode(
            kind=NodeKind.ADVICE, offset=0, line=1, column=1,
            category="duas palavras", text="Pergunta",
        )
        builder = KnowledgeBuilder()

        with pytest.raises(ValidationError) as exc_info:
            builder.build([node])

        assert exc_info.value.codes == [IssueCode.MALFORMED_TOKEN]
        assert builder.issues[0].code == IssueCode.MALFORMED_TOKEN


class TestWarnings:
    def test_category_without_question_or_rule(self):
        _, builder = build("1 если погода-дождь то действие-зонт")

        assert any("'погода'" in w for w in builder.warnings)

    def test_question_for_unused_category(self):
        _, builder = build("1 если a-x то b-y\nвопрос a A?\nвопрос z Z?")

        assert len(builder.warnings) == 1
        assert "'z'" in builder.warnings[0]

    def test_translation_for_unknown_category(self):
        _, builder = build("1 если a-x то b-y\nвопрос a A?\nперевод q Rótulo")

        assert any("desconhecida 'q'" in w for w in builder.warnings)

    def test_repeated_condition_is_collapsed(self):
        base, builder = build("1 если a-x и a-x то b-y\nвопрос a A?")

        assert len(base.rule(1).conditions) == 1
        assert any("repetida" in w for w in builder.warnings)

    def test_clean_base_has_no_warnings(self, weather_text):
        _, builder = build(weather_text)

        assert builder.warnings == []


class TestIndexes:
    def test_rule_indexes(self, weather_base):
        concluding = [rule.id for rule in weather_base.rules_concluding("действие")]
        conditioned = [rule.id for rule in weather_base.rules_conditioned_on("ветер")]

        assert concluding == [1, 2, 3, 4]
        assert conditioned == [2, 3]
        assert weather_base.rules_concluding("погода") == ()

    def test_rule_line_numbers(self, weather_base):
        assert weather_base.rule(3).line == 3
