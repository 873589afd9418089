"""Testes do motor de inferência (encadeamento para frente)."""

import pytest

from expertsys.core import (
    Exhausted,
    InferenceEngine,
    NeedsInput,
    Pair,
    Resolved,
    SessionMisuseError,
    load_knowledge_base,
    resolve,
)


class TestResolution:
    def test_known_fact_fires_rule(self, umbrella_base):
        outcome = resolve(umbrella_base, "действие", {"погода": "дождь"})

        assert outcome == Resolved(pair=Pair("действие", "зонт"), fired=(1,))

    def test_asks_then_resolves(self, umbrella_base):
        engine = InferenceEngine(umbrella_base, "действие")

        outcome = engine.run()
        assert outcome == NeedsInput(
            category="погода",
            prompt="Какая сегодня погода?",
            choices=("дождь",),
        )
        assert engine.pending_category == "погода"

        outcome = engine.supply("погода", "дождь")
        assert isinstance(outcome, Resolved)
        assert outcome.pair == Pair("действие", "зонт")
        assert engine.pending_category is None

    def test_missing_question_exhausts(self):
        base = load_knowledge_base("1 если погода-дождь то действие-зонт")

        outcome = resolve(base, "действие")

        assert outcome == Exhausted(unanswered="погода")
        assert outcome.is_final

    def test_lowest_id_wins(self):
        base = load_knowledge_base(
            "1 если a-x то цель-один\n2 если b-y то цель-два"
        )

        outcome = resolve(base, "цель", {"a": "x", "b": "y"})

        assert outcome.pair == Pair("цель", "один")
        assert outcome.fired == (1,)

    def test_chaining_rescans_from_lowest_id(self):
        base = load_knowledge_base(
            "1 если c-z то цель-один\n"
            "2 если a-x то c-z\n"
            "3 если b-y то цель-два\n"
        )

        outcome = resolve(base, "цель", {"a": "x", "b": "y"})

        assert outcome.pair == Pair("цель", "один")
        assert outcome.fired == (2, 1)

    def test_last_fired_conclusion_overwrites(self):
        base = load_knowledge_base(
            "1 если a-x то m-um\n"
            "2 если a-x то m-dois\n"
            "3 если m-dois то goal-ok\n"
        )

        outcome = resolve(base, "goal", {"a": "x"})

        assert outcome.pair == Pair("goal", "ok")
        assert outcome.fired == (1, 2, 3)

    def test_target_in_initial_facts(self, weather_base):
        outcome = resolve(weather_base, "обувь", {"обувь": "сапоги"})

        assert outcome == Resolved(pair=Pair("обувь", "сапоги"), fired=())

    def test_multi_step_consultation(self, weather_base):
        engine = InferenceEngine(weather_base, "обувь")

        outcome = engine.run()
        assert outcome.category == "погода"
        assert outcome.choices == ("дождь", "снег", "солнце")

        outcome = engine.supply("погода", "дождь")
        assert outcome == Resolved(pair=Pair("обувь", "сапоги"), fired=(1, 5))
        assert engine.memory == {"погода": "дождь", "действие": "зонт", "обувь": "сапоги"}

    def test_fixed_point_without_conclusion(self, weather_base):
        engine = InferenceEngine(weather_base, "обувь")

        assert engine.run().category == "погода"
        assert engine.supply("погода", "снег").category == "ветер"

        outcome = engine.supply("ветер", "сильный")
        assert outcome == Exhausted(unanswered=None, fired=(2,))

    def test_best_conclusion_mode(self, weather_base):
        outcome = resolve(weather_base, None, {"погода": "солнце"})

        assert outcome.pair == Pair("обувь", "кроссовки")
        assert outcome.fired == (4, 6)


class TestQuestionSelection:
    def test_asks_lowest_id_pending_rule_first(self):
        base = load_knowledge_base(
            "1 если b-y то other-z\n"
            "2 если a-x то t-yes\n"
            "вопрос a A?\n"
            "вопрос b B?\n"
        )

        assert resolve(base, "t").category == "b"

    def test_asks_derivable_category_in_rule_order(self):
        base = load_knowledge_base(
            "1 если mid-m то t-yes\n"
            "2 если a-x то mid-m\n"
            "вопрос mid Mid?\n"
            "вопрос a A?\n"
        )

        assert resolve(base, "t").category == "mid"

    def test_unanswerable_first_category_exhausts(self):
        base = load_knowledge_base(
            "1 если a-x то t-one\n"
            "2 если b-y то t-two\n"
            "вопрос b B?\n"
        )

        assert resolve(base, "t") == Exhausted(unanswered="a", fired=())

    def test_contradicted_rule_still_asks_remaining_condition(self):
        base = load_knowledge_base(
            "1 если a-x и b-y то t-um\n"
            "2 если c-z то t-dois\n"
            "вопрос a A?\n"
            "вопрос b B?\n"
            "вопрос c C?\n"
        )
        engine = InferenceEngine(base, "t")

        assert engine.run().category == "a"
        assert engine.supply("a", "nao").category == "b"
        assert engine.supply("b", "y").category == "c"

    def test_condition_order_within_rule(self):
        base = load_knowledge_base(
            "1 если b-y и a-x то t-yes\nвопрос a A?\nвопрос b B?"
        )

        assert resolve(base, "t", {"b": "y"}).category == "a"
        assert resolve(base, "t").category == "b"

    def test_prompt_falls_back_to_label(self):
        base = load_knowledge_base(
            "1 если a-x то t-yes\nвопрос a\nперевод a Categoria A"
        )

        assert resolve(base, "t").prompt == "Categoria A"

    def test_run_repeats_pending_question(self, umbrella_base):
        engine = InferenceEngine(umbrella_base, "действие")

        first = engine.run()
        assert engine.run() is first
        assert engine.outcome is first


class TestFocusedSelection:
    def test_skips_rules_irrelevant_to_target(self):
        base = load_knowledge_base(
            "1 если b-y то other-z\n"
            "2 если a-x то t-yes\n"
            "вопрос a A?\n"
            "вопрос b B?\n"
        )
        engine = InferenceEngine(base, "t", focused=True)

        assert engine.run().category == "a"
        assert engine.supply("a", "w") == Exhausted(unanswered=None, fired=())

    def test_skips_contradicted_rules(self):
        base = load_knowledge_base(
            "1 если a-x и b-y то t-um\n"
            "2 если c-z то t-dois\n"
            "вопрос a A?\n"
            "вопрос b B?\n"
            "вопрос c C?\n"
        )
        engine = InferenceEngine(base, "t", focused=True)

        assert engine.run().category == "a"
        assert engine.supply("a", "nao").category == "c"

    def test_keeps_rule_order_among_remaining_rules(self):
        base = load_knowledge_base(
            "1 если mid-m то t-yes\n"
            "2 если a-x то mid-m\n"
            "вопрос mid Mid?\n"
            "вопрос a A?\n"
        )

        assert resolve(base, "t", focused=True).category == "mid"

    def test_without_target_considers_every_rule(self):
        base = load_knowledge_base(
            "1 если b-y то other-z\n"
            "2 если a-x то t-yes\n"
            "вопрос a A?\n"
            "вопрос b B?\n"
        )

        assert resolve(base, None, focused=True).category == "b"


class TestContract:
    def test_supply_without_pending_question(self, umbrella_base):
        engine = InferenceEngine(umbrella_base, "действие", {"погода": "дождь"})
        engine.run()

        with pytest.raises(SessionMisuseError):
            engine.supply("погода", "дождь")

    def test_supply_wrong_category(self, weather_base):
        engine = InferenceEngine(weather_base, "обувь")
        engine.run()

        with pytest.raises(SessionMisuseError):
            engine.supply("ветер", "сильный")

        assert engine.pending_category == "погода"
        assert engine.memory == {}

    def test_supply_malformed_value(self, umbrella_base):
        engine = InferenceEngine(umbrella_base, "действие")
        engine.run()

        with pytest.raises(SessionMisuseError):
            engine.supply("погода", "два слова")

    @pytest.mark.parametrize("target,facts", [
        ("duas palavras", None),
        ("действие", {"погода": ""}),
        ("действие", {"a b": "x"}),
    ])
    def test_malformed_arguments(self, umbrella_base, target, facts):
        with pytest.raises(ValueError):
            InferenceEngine(umbrella_base, target, facts)

    def test_base_is_not_modified(self, weather_base):
        before = weather_base.to_text()
        engine = InferenceEngine(weather_base, "обувь")
        engine.run()
        engine.supply("погода", "дождь")

        assert weather_base.to_text() == before

    def test_initial_facts_are_copied(self, umbrella_base):
        facts = {"погода": "дождь"}
        resolve(umbrella_base, "действие", facts)

        assert facts == {"погода": "дождь"}

    def test_independent_engines_share_base(self, weather_base):
        first = InferenceEngine(weather_base, "обувь")
        second = InferenceEngine(weather_base, "обувь")
        first.run()
        second.run()

        assert first.supply("погода", "дождь").pair.value == "сапоги"
        assert second.supply("погода", "солнце").pair.value == "кроссовки"

    def test_deterministic(self, weather_base):
        def consult():
            engine = InferenceEngine(weather_base, "обувь")
            trace = [engine.run()]
            trace.append(engine.supply("погода", "снег"))
            trace.append(engine.supply("ветер", "слабый"))
            return trace

        assert consult() == consult()

    def test_terminates_on_long_chain(self):
        size = 50
        lines = [f"{i} если k{i}-да то k{i + 1}-да" for i in range(1, size + 1)]
        lines.append("вопрос k1 Começar?")
        base = load_knowledge_base("\n".join(lines))
        engine = InferenceEngine(base, f"k{size + 1}")

        assert engine.run().category == "k1"
        outcome = engine.supply("k1", "да")

        assert isinstance(outcome, Resolved)
        assert len(outcome.fired) == size
