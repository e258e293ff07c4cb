"""Prompts sent to the model oracle."""

ANALYSIS_SYSTEM_PROMPT = (
    "You are an expert Python code reviewer and teacher. Provide thorough, "
    "educational analysis of code with clear explanations and actionable "
    "suggestions."
)

ANSWER_SYSTEM_PROMPT = (
    "You are a helpful Python programming teacher. Answer questions about code "
    "clearly and educationally, providing examples when helpful."
)

JSON_ONLY_INSTRUCTION = (
    "\n\nIMPORTANT: You must respond with valid JSON only. "
    "No markdown code blocks, no explanations, no additional text. "
    "Return ONLY the raw JSON object."
)

ANALYSIS_PROMPT = """Analyze the following Python code and provide a comprehensive analysis in JSON format.
{filename_line}
Code to analyze:
```python
{code}
```

Please provide your analysis in the following JSON structure:
{{
  "explanation": {{
    "lineRanges": [
      {{
        "start": 1,
        "end": 3,
        "title": "Brief title describing this code section",
        "explanation": "Detailed explanation of what this code does in plain English"
      }}
    ]
  }},
  "issues": [
    {{
      "line": 5,
      "severity": "error|warning|info",
      "type": "Bug Type (e.g., Potential Bug, Performance, Security)",
      "description": "Description of the issue",
      "suggestion": "Suggested fix or improvement"
    }}
  ]
}}

Focus on:
1. Breaking down the code into logical sections with line-by-line explanations
2. Identifying potential bugs, security issues, performance problems
3. Suggesting improvements and best practices
4. Using clear, beginner-friendly language for explanations"""

ANSWER_PROMPT = """Given the following Python code, please answer the user's question in a clear and helpful way.

Code:
```python
{code}
```

{context_block}User's question: {question}

Please provide a clear, educational answer that helps the user understand the code better."""


def build_analysis_prompt(code: str, filename: str | None = None) -> str:
    """Build the user prompt for a structured analysis request."""
    filename_line = f"\nFile: {filename}\n" if filename else ""
    return ANALYSIS_PROMPT.format(code=code, filename_line=filename_line)


def build_answer_prompt(code: str, question: str, context: str | None = None) -> str:
    """Build the user prompt for a follow-up question."""
    context_block = f"Previous context: {context}\n\n" if context else ""
    return ANSWER_PROMPT.format(
        code=code, question=question, context_block=context_block
    )
