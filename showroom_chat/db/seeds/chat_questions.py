from sqlalchemy import func, select

from showroom_chat.client.db.psql import session_scope
from showroom_chat.db.models.chat_question import ChatQuestion

STEP1_QUESTIONS = [
    "Quero veículos até 100 mil reais",
    "Procurando carros automáticos",
    "Veículos com baixa quilometragem",
    "Carros de 2020 em diante",
    "Veículos flex ou híbridos",
    "Procurando SUVs",
    "Carros de primeira mão",
    "Veículos com câmbio manual",
    "Carros de luxo",
    "Veículos para família",
]

STEP2_QUESTIONS = [
    "Quais os prós e contras desse veículo?",
    "Ele está em que loja?",
    "Posso agendar um test drive?",
    "Qual a quilometragem atual?",
    "Tem histórico de acidentes?",
    "Quantos donos já teve?",
    "Está disponível para reserva?",
    "Qual o valor do IPVA?",
    "Tem documentação em dia?",
    "Posso ver mais fotos?",
]


def seed_chat_questions() -> int:
    """Insert the default follow-up prompts when the table is empty. Returns rows added."""
    with session_scope() as db:
        if db.execute(select(func.count(ChatQuestion.id))).scalar_one():
            return 0
        rows = [ChatQuestion(question=q, step=1, is_enabled=True) for q in STEP1_QUESTIONS]
        rows += [ChatQuestion(question=q, step=2, is_enabled=True) for q in STEP2_QUESTIONS]
        db.add_all(rows)
        return len(rows)
