MODIFY_HTML_PROMPT = """\
You are an expert web developer editing an existing web page.
Apply the user's instructions to the HTML below and return the complete, updated HTML document.
Keep everything the instructions do not mention unchanged.
Return only HTML inside a single ```html code block, with no explanations.

Current HTML:
{html}

Instructions:
{prompt}
"""

CREATE_HTML_PROMPT = """\
You are an expert web developer building a new web page.
Write a complete, self-contained HTML document that satisfies the user's request.
Prefer semantic HTML and inline <style> blocks; do not use inline JavaScript or event handler attributes.
Return only HTML inside a single ```html code block, with no explanations.

Request:
{prompt}
"""
