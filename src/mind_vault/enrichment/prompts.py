"""
System prompts for content analysis.
"""

CONTENT_ANALYSIS_SYSTEM_PROMPT = """You organise a personal knowledge vault.
Analyse the content you are given. It may be a URL or plain text.

Respond with a JSON object with exactly these keys:
- "title": a short, descriptive title
- "summary": a summary of at most two sentences
- "tags": a list of 3-5 relevant tags
- "type": "link" if the content is a URL, "snippet" if it is source code, otherwise "note"

Respond with JSON only."""


CONTENT_PROMPT = """Content: "{content}"
"""
