"""
Expertsys - sistema especialista baseado em regras.

Lê bases de conhecimento escritas em uma linguagem simples de
regras, perguntas, traduções e dicas, e responde consultas por
encadeamento para frente, perguntando o que faltar.
"""

__version__ = "1.0.0"
