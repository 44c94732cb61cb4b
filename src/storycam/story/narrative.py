"""
Story Narration
===============

Turns face cards into lines of the detective story.

Each card becomes an observation about the suspect at that moment;
the most frequent dominant emotion decides the closing verdict.
Unknown labels fall back to a neutral line.
"""

from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Sequence

from storycam.story.results import UNKNOWN_EMOTION, FaceCard


OPENING = "Case notes, {count} observation(s) logged from the interrogation tape."
NO_FACES_OPENING = "The tape shows an empty room. Whoever sent the messages stayed out of frame."

OBSERVATIONS: Dict[str, str] = {
    "HAPPY": "At {time}s the suspect smiled. Too relaxed for someone with nothing to hide.",
    "SAD": "At {time}s the suspect's shoulders dropped. Regret, maybe.",
    "ANGRY": "At {time}s a flash of anger. The cipher struck a nerve.",
    "SURPRISED": "At {time}s the suspect's eyes widened. They didn't expect that question.",
    "CALM": "At {time}s the suspect stayed perfectly calm. Rehearsed.",
    "DISGUSTED": "At {time}s a look of disgust. Someone in this story crossed a line.",
    "CONFUSED": "At {time}s the suspect looked lost. Either innocent or a good actor.",
    "FEAR": "At {time}s fear. Whoever wrote the messages has them scared.",
}
NEUTRAL_OBSERVATION = "At {time}s the suspect gave nothing away."

VERDICTS: Dict[str, str] = {
    "HAPPY": "Verdict: the suspect is enjoying this. Keep them talking.",
    "SAD": "Verdict: a reluctant accomplice. Lean on the guilt.",
    "ANGRY": "Verdict: they know who wrote the cipher. Push harder.",
    "SURPRISED": "Verdict: the suspect is hearing this for the first time.",
    "CALM": "Verdict: cool under pressure. Check the alibi twice.",
    "DISGUSTED": "Verdict: they despise the sender. Follow the grudge.",
    "CONFUSED": "Verdict: wrong suspect. The real cipher-maker is still out there.",
    "FEAR": "Verdict: the suspect needs protection more than questioning.",
}
NEUTRAL_VERDICT = "Verdict: inconclusive. Record another statement."


@dataclass(frozen=True)
class Narrative:
    """Opening, per-face observations and verdict."""

    opening: str
    observations: List[str]
    verdict: str

    def lines(self) -> List[str]:
        return [self.opening, *self.observations, self.verdict]

    def render_text(self) -> str:
        return "\n".join(self.lines())


def _card_seconds(card: FaceCard) -> str:
    # "Time 1.5 Seconds" -> "1.5"
    return card.time_label.split()[1]


def observe(card: FaceCard) -> str:
    """Story line for one face card."""
    template = OBSERVATIONS.get(card.emotion_label, NEUTRAL_OBSERVATION)
    return template.format(time=_card_seconds(card))


def dominant_label(cards: Sequence[FaceCard]) -> str:
    """
    Most frequent known emotion across cards.

    Ties go to the label seen first. Returns "Unknown" when no card
    has a known emotion.
    """
    known = [card.emotion_label for card in cards if card.emotion_label != UNKNOWN_EMOTION]
    if not known:
        return UNKNOWN_EMOTION
    counts = Counter(known)
    best = max(counts.values())
    return next(label for label in known if counts[label] == best)


def narrate(cards: Sequence[FaceCard]) -> Narrative:
    """Build the narrative for a results screen's cards."""
    if not cards:
        return Narrative(opening=NO_FACES_OPENING, observations=[], verdict=NEUTRAL_VERDICT)

    return Narrative(
        opening=OPENING.format(count=len(cards)),
        observations=[observe(card) for card in cards],
        verdict=VERDICTS.get(dominant_label(cards), NEUTRAL_VERDICT),
    )
