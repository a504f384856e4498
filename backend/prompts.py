# Prompt templates for the three assistant operations.
# Filled with str.format; literal braces in the JSON skeletons are doubled.
# User-supplied values are inserted as JSON string literals (quoted and escaped).

PARSE_PROMPT = """Return ONLY valid JSON. No markdown.

- Resolve any relative dates (for example "tomorrow", "next week") relative to the provided CURRENT_DATE.
- ALWAYS return `dueDate` in ISO format: YYYY-MM-DD, or an empty string if no date is present.
- Do NOT return two-digit years. Use 4-digit years.
- Use an empty string for any other field you cannot infer.

{{
 "title": "",
 "description": "",
 "category": "",
 "priority": "",
 "dueDate": "",
 "estimatedTime": ""
}}

CURRENT_DATE: {current_date}

Task: {text}
"""

IMPROVE_PROMPT = """Return ONLY valid JSON.

Rewrite this task so the title is short and actionable and the description is clear and specific.

{{
 "improvedTitle": "",
 "improvedDescription": ""
}}

Title: {title}
Description: {description}
"""

CLASSIFY_PROMPT = """Return ONLY valid JSON.

Suggest a short category for this task and a priority of "High", "Medium" or "Low".

{{
 "category": "",
 "priority": ""
}}

Title: {title}
Description: {description}
"""
