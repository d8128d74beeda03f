"""LLM prompt templates for the narrative and mentor chat.

All numbers quoted in these prompts are computed deterministically before the
LLM is involved. The prompts only ask the model for prose.
"""

import json
from typing import Any

from repograde.models.analysis import SummaryStyle
from repograde.models.roles import CustomRole, PresetRole, Role, role_label

# =============================================================================
# Style directives
# =============================================================================

STYLE_INSTRUCTIONS: dict[SummaryStyle, str] = {
    SummaryStyle.CLARITY: (
        "Focus on easy-to-understand sentences, logical flow, and no ambiguity. "
        "Use simple language."
    ),
    SummaryStyle.NATURALNESS: (
        "Use human-like, conversational but professional language. "
        "Avoid robotic phrasing."
    ),
    SummaryStyle.PROFESSIONAL: (
        "Use a formal, mentoring tone. Avoid slang. Be objective and authoritative."
    ),
    SummaryStyle.INFORMATIVENESS: (
        "Be highly actionable, specific, and detailed. "
        "Prioritize density of information over fluff."
    ),
}

# =============================================================================
# Role directives
# =============================================================================

ROLE_INSTRUCTIONS: dict[PresetRole, str] = {
    PresetRole.STUDENT: (
        "Focus on educational value. Explain *why* certain practices are important. "
        "Suggest learning resources where applicable. The roadmap should be a learning path."
    ),
    PresetRole.MENTOR: (
        "Provide evaluative and constructive feedback. Highlight potential pitfalls "
        "and best practices. Use a coaching tone."
    ),
    PresetRole.RECRUITER: (
        "Focus on employability, code standards, and project maturity. Highlight if "
        "the candidate demonstrates industry-ready skills."
    ),
    PresetRole.DEVELOPER: (
        "Focus on technical depth, architecture, scalability, and maintainability. "
        "Be concise and technical. Roadmap should be advanced refactoring or scaling steps."
    ),
}

CUSTOM_ROLE_TEMPLATE = (
    "Focus on values important to a {role}. Provide a balanced and comprehensive "
    "analysis suitable for this role."
)


def style_instruction(style: SummaryStyle) -> str:
    """Return the fixed instruction for a summary style."""
    return STYLE_INSTRUCTIONS[style]


def role_instruction(role: Role) -> str:
    """Return the instruction for a role.

    Total over the Role union: preset roles map to their fixed instruction,
    custom roles to the generic template filled with the literal role string.
    """
    if isinstance(role, PresetRole):
        return ROLE_INSTRUCTIONS[role]
    if isinstance(role, CustomRole):
        return CUSTOM_ROLE_TEMPLATE.format(role=role.name)
    raise TypeError(f"Unsupported role type: {type(role).__name__}")


# =============================================================================
# Narrative prompt
# =============================================================================

NARRATIVE_SYSTEM_PROMPT = (
    "You are an AI-powered GitHub Repository Evaluation System designed for "
    "hackathon judging. Your behavior must be deterministic, consistent, and "
    "repeatable. If the same repository is analyzed multiple times, you MUST "
    "produce the same strengths, weaknesses, and roadmap items. Never change the "
    "pre-calculated scores. Return ONLY JSON."
)

# Display headings for the agent blocks, in canonical order
AGENT_HEADINGS: dict[str, str] = {
    "codeQuality": "CODE QUALITY AGENT",
    "documentation": "DOCUMENTATION AGENT",
    "commitHealth": "COMMIT AGENT",
    "testCoverage": "TEST COVERAGE AGENT",
    "techStack": "TECH STACK AGENT",
}

NARRATIVE_TEMPLATE = """\
TARGET AUDIENCE
You are generating this report for a **{role}**.
{role_instruction}

INPUT DATA
REPOSITORY: {full_name}
DESCRIPTION: {description}
LANGUAGE: {language}

--- RULE-BASED SCORING (PRE-CALCULATED) ---
The following scores have been calculated based on strict deterministic rules:

{agent_blocks}

--- FIXED WEIGHT FINAL SCORE ---
{formula}
FINAL OVERALL SCORE: {overall_score}/100

--- SUMMARY GENERATION ---
Generate a report in the "{style}" style.
Style guide for "{style}":
{style_instruction}

OUTPUT REQUIREMENTS:
1. overallScore: {overall_score} (already calculated, copy it).
2. summary: A textual summary adhering to the "{style}" style and tailored for a {role}.
3. strengths: 3 specific strengths based on the data.
4. weaknesses: 3 specific weaknesses based on the data.
5. roadmap: 5 actionable steps to improve the repository.

Return ONLY JSON.
"""

NARRATIVE_RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "overallScore": {"type": "number"},
        "agentScores": {
            "type": "object",
            "properties": {
                "codeQuality": {"type": "number"},
                "documentation": {"type": "number"},
                "commitHealth": {"type": "number"},
                "testCoverage": {"type": "number"},
                "techStack": {"type": "number"},
            },
            "required": [
                "codeQuality",
                "documentation",
                "commitHealth",
                "testCoverage",
                "techStack",
            ],
        },
        "summary": {"type": "string"},
        "strengths": {"type": "array", "items": {"type": "string"}},
        "weaknesses": {"type": "array", "items": {"type": "string"}},
        "roadmap": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "title": {"type": "string"},
                    "description": {"type": "string"},
                    "difficulty": {
                        "type": "string",
                        "enum": ["Beginner", "Intermediate", "Advanced"],
                    },
                    "category": {
                        "type": "string",
                        "enum": ["Documentation", "Code Quality", "DevOps", "Features"],
                    },
                },
                "required": ["title", "description", "difficulty", "category"],
            },
        },
    },
    "required": [
        "overallScore",
        "agentScores",
        "summary",
        "strengths",
        "weaknesses",
        "roadmap",
    ],
}


def format_agent_blocks(payload: dict[str, Any]) -> str:
    """Format the per-agent section of the narrative prompt.

    Args:
        payload: Deterministic narrative payload (see NarrativeRequest.to_payload)

    Returns:
        One block per agent with score, context and any extra facts
    """
    blocks = []
    agents = payload["agents"]
    for key, heading in AGENT_HEADINGS.items():
        agent = agents[key]
        lines = [f"[{heading}]: {agent['score']}/100", f"Context: {agent['evidence']}"]
        if key == "commitHealth":
            lines.append(f"Recent Msg: {' | '.join(payload['recentCommitMessages'])}")
        elif key == "techStack":
            lines.append(f"Dep File Snippet: {payload['manifestSnippet']}")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def build_narrative_prompt(payload: dict[str, Any]) -> str:
    """Render the narrative prompt from the deterministic payload."""
    repository = payload["repository"]
    return NARRATIVE_TEMPLATE.format(
        role=payload["role"]["label"],
        role_instruction=payload["role"]["instruction"],
        full_name=repository["fullName"],
        description=repository["description"] or "None",
        language=repository["language"] or "Unknown",
        agent_blocks=format_agent_blocks(payload),
        formula=payload["formula"],
        overall_score=payload["overallScore"],
        style=payload["style"]["name"],
        style_instruction=payload["style"]["instruction"],
    )


def role_directive(role: Role) -> dict[str, str]:
    """Return the role label and instruction as a payload fragment."""
    return {"label": role_label(role), "instruction": role_instruction(role)}


# =============================================================================
# Mentor chat
# =============================================================================

MENTOR_SYSTEM_TEMPLATE = """\
You are an AI Mentor Chatbot integrated into a GitHub Repository Evaluation system.

Your responsibilities:
1. Greet users politely and professionally.
2. Answer questions about the analyzed GitHub repository using the provided evaluation data.
3. Explain scores, roadmap items, and recommendations clearly.
4. Answer general programming, GitHub, and software engineering questions if the query is not repository-specific.

Context provided to you:
{context}

Strict Rules:
- Do NOT change or recompute any scores.
- Do NOT invent new issues or strengths.
- Base repository-specific answers strictly on the given analysis.
- Use a friendly, professional mentoring tone.
- If the user greets you, respond with a warm greeting and explain how you can help.
- If the user asks general technical questions, answer them clearly with examples.

Always behave like a supportive AI mentor.
"""


def build_mentor_system_prompt(context: dict[str, Any]) -> str:
    """Render the mentor system prompt around a JSON context object."""
    return MENTOR_SYSTEM_TEMPLATE.format(context=json.dumps(context, indent=2))
