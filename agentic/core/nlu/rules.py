from typing import Sequence, Tuple

from .types import Intent

# Keyword groups (lower-cased substring match)
ID_WORDS = ("id", "رقم")
REGISTER_WORDS = ("register", "create", "add", "سجل", "انشئ", "ضيف")
UPDATE_WORDS = ("update", "change", "modify", "تعديل", "تحديث", "غير")
DELETE_WORDS = ("delete", "remove", "حذف", "مسح")
GET_BY_ID_WORDS = ("get", "user", "هات", "مستخدم")
LIST_WORDS = ("get", "list", "show", "هات", "اعرض", "قائمة")
AR_DELETE_WORDS = ("حذف", "مسح", "امسح", "احذف")
AR_ALL_WORDS = ("الكل", "كل", "الجميع", "جميع", "المستخدمين")

Group = Tuple[str, ...]
Alternative = Tuple[Group, ...]

# Evaluated top to bottom; the first rule with a fully matching alternative wins.
# An alternative matches when every one of its groups has a keyword in the text.
RULES: Sequence[Tuple[Intent, Tuple[Alternative, ...]]] = (
    (Intent.REGISTER, ((REGISTER_WORDS,),)),
    (Intent.UPDATE, ((ID_WORDS, UPDATE_WORDS),)),
    (Intent.DELETE, ((ID_WORDS, DELETE_WORDS),)),
    (Intent.GET_BY_ID, ((ID_WORDS, GET_BY_ID_WORDS),)),
    (Intent.LIST, ((LIST_WORDS,),)),
    # single delete above shadows this when an id token is present
    (Intent.DELETE_ALL, ((("delete",), ("all",)), (AR_DELETE_WORDS, AR_ALL_WORDS))),
)


def _has_any(text: str, words: Group) -> bool:
    return any(word in text for word in words)


def _matches(text: str, alternatives: Tuple[Alternative, ...]) -> bool:
    return any(all(_has_any(text, group) for group in groups) for groups in alternatives)


class RulesClassifier:
    """Keyword rules mapping a prompt to one user-management intent."""

    def __init__(self, rules: Sequence[Tuple[Intent, Tuple[Alternative, ...]]] = RULES):
        self.rules = rules

    def classify(self, text: str) -> Intent:
        t = text.lower()
        for intent, alternatives in self.rules:
            if _matches(t, alternatives):
                return intent
        return Intent.UNRECOGNIZED
