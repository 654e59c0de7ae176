# Reusable prompt fragments and the composer shared by every provider client.

from __future__ import annotations
from typing import Optional

from .types import ComposedPrompt, GenerationRequest, Language, TierLimits

RULES_PREFIX_CHARS = 800

FOLLOWUP_CONTRACT = """\
FOLLOW-UP (mandatory):
After the bullets, ALWAYS close with exactly this block, filling in two deeper questions
the user is likely to ask next:
Would you also like to know
a) <first deeper question>?
or
b) <second deeper question>?
Reply a or b to confirm.
"""


def _user_context(rank: Optional[str], vessel: Optional[str]) -> str:
    rank_label = rank or "Maritime Professional"
    vessel_label = f"aboard {vessel}" if vessel else "shore-based"
    return f"{rank_label} {vessel_label}"


def _language_line(language: Language) -> str:
    if language == Language.ALTERNATE:
        return "Respond in Turkish language only"
    return "Respond in English language only"


def build_system_prompt(
    category: str,
    user_context: str,
    language: Language,
    limits: Optional[TierLimits] = None,
) -> str:
    if limits:
        length_line = f"- Keep the bullets between {limits.min_words}-{limits.max_words} words in total"
    else:
        length_line = "- Keep the bullets concise; go deeper only where the question needs it"
    return f"""You are QBOT, an advanced maritime AI assistant and the primary chat interface for QaaqConnect.
You specialize in {category} and serve the global maritime community with expert knowledge on:
- Maritime engineering, maintenance, and troubleshooting
- Navigation, regulations, and safety procedures
- Ship operations, cargo handling, and port procedures
- Career guidance for maritime professionals
- Technical specifications for maritime equipment

User context: {user_context}

LANGUAGE: {_language_line(language)}

RESPONSE FORMAT:
- ALWAYS respond in bullet point format with exactly 3-5 bullet points
- Each bullet point should be 10-16 words maximum
{length_line}
- Use technical language with practical details
- Include safety considerations and maritime regulations when relevant
- Example format:
  • [Specific action/solution with technical detail]
  • [Safety consideration or regulation reference]
  • [Additional guidance or best practice]

{FOLLOWUP_CONTRACT}"""


def compose_prompt(
    request: GenerationRequest,
    limits: Optional[TierLimits] = None,
    rules_prefix_chars: int = RULES_PREFIX_CHARS,
) -> ComposedPrompt:
    """Build the instruction block; `limits` is only passed for rate-limited callers."""
    profile = request.profile
    system = build_system_prompt(
        category=request.category,
        user_context=_user_context(profile.rank, profile.vessel),
        language=request.language,
        limits=limits,
    )
    if request.active_rules and request.active_rules.strip():
        rules = request.active_rules.strip()[:rules_prefix_chars]
        system += f"\nActive bot documentation guidelines:\n{rules}\n"
    return ComposedPrompt(system=system, user=request.message.strip(), history=list(request.history))
