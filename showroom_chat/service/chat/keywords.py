import re
from collections import Counter
from typing import Iterable, Optional

from showroom_chat.model.chat.session_response import KeywordCount

WORD_SPLIT_RE = re.compile(r"[\s.,!?;:\-()|]+")
# Prefix the chat service adds to a visitor turn when it has a vehicle in focus
CONTEXT_HEADER_RE = re.compile(r"^\s*shop:[^|]*\|\s*vehicle:[^|]*\|\s*")

# Portuguese function words plus vocabulary every car question contains
STOP_WORDS = frozenset(
    """
    a o e é de do da em para com um uma os as que não na no por seu sua mais menos muito pouco
    este esta isso aquilo ele ela eles elas eu tu nós vós me te se nos vos lhe lhes ante após até
    contra desde entre perante sem sob sobre trás mas porém todavia contudo entretanto ou nem
    porque pois como quando bem mal hoje ontem amanhã agora antes depois sempre nunca jamais
    também tampouco sim ser estar ter haver fazer dizer ir vir ver dar querer poder dever saber
    quer quero gostaria pode poderia deve deveria vou vai vem estou está estava tenho tem tinha
    há havia faço faz fiz digo diz disse veículo veiculo id procurando procurar encontrar
    preço valor custo pagamento consulta consultar informação informações detalhes detalhe
    disponível disponibilidade estoque novo usado seminovo km quilometragem ano marca modelo
    versão versao cor cambio câmbio combustível combustivel gasolina álcool alcool diesel flex
    híbrido hibrido elétrico eletrico loja shop vehicle
    """.split()
)


def _is_keyword(word: str) -> bool:
    return (
        len(word) > 2
        and word not in STOP_WORDS
        and not word.isdigit()
        and "http" not in word
        and "www" not in word
        and "@" not in word
    )


def top_keywords(messages: Iterable[str], limit: int = 10, mention_any: Optional[Iterable[str]] = None) -> list[KeywordCount]:
    """
    Most frequent words across visitor messages.

    With `mention_any`, only messages containing one of those strings
    (vehicle ids of a shop) are counted. The context header in front of a
    turn is matched for `mention_any` but never counted.
    """
    needles = [n.lower() for n in mention_any] if mention_any is not None else None
    counter: Counter = Counter()
    for message in messages:
        text = (message or "").lower()
        if needles is not None and not any(n in text for n in needles):
            continue
        text = CONTEXT_HEADER_RE.sub("", text, count=1)
        counter.update(w for w in WORD_SPLIT_RE.split(text) if w and _is_keyword(w))
    return [KeywordCount(keyword=word, count=count) for word, count in counter.most_common(limit)]
