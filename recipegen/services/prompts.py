"""Prompts for quick home-style recipe generation."""

BASE_PROMPT = (
    "You are an Indian home cook. Suggest 2-3 easy recipes in 10-30 minutes "
    "using ONLY the ingredients provided by the user. Do NOT add any extra "
    "ingredients. Make it kid-friendly. Return only valid JSON, no other text."
)

# Sent as the system message to chat-completion providers
SYSTEM_PROMPT = "Return only a JSON array of recipes. No markdown, no explanation."

EXPECTED_JSON_SCHEMA = """[
  {
    "title": "string",
    "time": "string (e.g. 20 mins)",
    "ingredients": ["string"],
    "steps": ["string"],
    "tips": "string"
  }
]"""

# Structured-output hint for providers that accept a response schema
RECIPE_RESPONSE_SCHEMA = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "title": {"type": "string", "description": "Recipe name"},
            "time": {"type": "string", "description": "e.g. 20 mins"},
            "ingredients": {
                "type": "array",
                "items": {"type": "string"},
                "description": "List of ingredients",
            },
            "steps": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Cooking steps",
            },
            "tips": {"type": "string", "description": "Optional tips"},
        },
        "required": ["title", "time", "ingredients", "steps", "tips"],
    },
}


def build_prompt(user_input: str) -> str:
    """
    Generate the recipe prompt for the user's ingredients.

    The user's text always goes last so the model reads the rules first.
    """
    return f"""{BASE_PROMPT}

Format exactly like this (JSON array only):
{EXPECTED_JSON_SCHEMA}

IMPORTANT: Use ONLY the ingredients mentioned by the user. Do NOT add any extra ingredients.

User request: {user_input}"""
