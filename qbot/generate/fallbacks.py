# Canned answers used when a provider returns nothing or every provider fails.

import random
from typing import Optional

MICRO_ANSWERS = [
    "• Check manufacturer's manual first\n• Follow proper safety protocols\n• Consult senior engineer if unsure",
    "• Inspect for mechanical wear signs\n• Verify lubrication levels adequate\n• Test electrical connections thoroughly",
    "• Monitor operating parameters closely\n• Check environmental factors impact\n• Document all readings properly",
]

STATIC_TIPS = MICRO_ANSWERS + [
    "• Review temperature and pressure readings\n• Analyze vibration patterns carefully\n• Schedule preventive maintenance checks",
    "• Prioritize safety protocols always\n• Consult vessel maintenance schedule\n• Report findings to senior officer",
]


def micro_answer(rng: Optional[random.Random] = None) -> str:
    return (rng or random).choice(MICRO_ANSWERS)


def static_tip(rng: Optional[random.Random] = None) -> str:
    return (rng or random).choice(STATIC_TIPS)
