"""Strip markdown fences and chatter around the JSON a model returns."""

import re

CODE_FENCE = re.compile(r"^```(?:json)?\s*([\s\S]*?)```\s*$", re.IGNORECASE)


def sanitize(raw: str) -> str:
    """
    Cut raw model output down to the part that looks like a JSON array.

    This is positional cleanup only - the result is not guaranteed to parse.
    """
    text = raw.strip()
    text = text.replace("\r\n", "\n").replace("\r", "\n")

    # ```json ... ``` or ``` ... ```
    match = CODE_FENCE.match(text)
    if match:
        text = match.group(1).strip()

    # "Here are your recipes: [...] Enjoy!"
    start = text.find("[")
    end = text.rfind("]")
    if start != -1 and end > start:
        text = text[start:end + 1]

    return text
