"""Appropriate Casey: tones down shouting in submitted blips.

Capitalizes the start of each sentence and turns runs of exclamation marks
into a full stop.

Run with:
    rave serve appropriate_casey:robot        (from this directory)
"""

import re

from rave import Context, Event, Robot

_SENTENCE = re.compile(r"(\s*)([^!.]+)")
_EXCLAMATIONS = re.compile(r"!+")


def tone_down(text: str) -> str:
    text = _SENTENCE.sub(lambda m: m.group(1) + m.group(2).capitalize(), text)
    return _EXCLAMATIONS.sub(".", text)


class AppropriateCasey(Robot):
    def blip_submitted(self, event: Event, context: Context) -> None:
        blip = event.blip
        if blip is None or blip.is_deleted:
            return
        text = tone_down(blip.content)
        if text != blip.content:
            blip.set_text(text)


robot = AppropriateCasey(
    "Appropriate Casey",
    robot_id="appropriate-casey@appspot.com",
)
