import logging
from typing import Optional

from .rules import RulesClassifier
from .slots import extract_id, extract_register_slots, extract_update_slots
from .types import Intent, NLUResult, Slots


class NLU:
    """
    Turns a prompt into an NLUResult: intent first, then only the slot
    extractors that intent needs.
    """

    def __init__(self, classifier: Optional[RulesClassifier] = None):
        self.classifier = classifier or RulesClassifier()
        self.log = logging.getLogger("nlu")

    def parse(self, prompt: str) -> NLUResult:
        intent = self.classifier.classify(prompt)
        self.log.info("NLU: Intent detected: %s", intent.value)

        if intent is Intent.REGISTER:
            slots = extract_register_slots(prompt)
        elif intent is Intent.UPDATE:
            slots = extract_update_slots(prompt)
        elif intent in (Intent.DELETE, Intent.GET_BY_ID):
            slots = Slots(id=extract_id(prompt))
        else:
            slots = Slots()

        self.log.info(
            "NLU: Extracted slots: name=%r age=%r job_title=%r id=%r",
            slots.name, slots.age, slots.job_title, slots.id,
        )
        return NLUResult(intent=intent, slots=slots, original_text=prompt)
