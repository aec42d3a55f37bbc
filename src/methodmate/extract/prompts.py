from __future__ import annotations

import re

EXTRACT_METHOD_PROMPT = """You are a research methodology expert. Your task is to identify and extract the methodology section from this academic paper.

Look for sections that describe:
1. Research design or methodology
2. Data collection methods
3. Analysis procedures
4. Experimental setup

Simply locate and extract these sections from the text. If you find them, return the relevant text passages. If you don't find explicit methodology sections, return null.

Paper text:
{text}

Remember: Just extract and return the relevant text. No need to analyze, summarize, or modify it."""

SUMMARIZE_METHOD_PROMPT = """As a research assistant, help me understand the methodology used in this paper.
Please read the text and create a brief summary of the research methods used.
Focus on identifying:
- The type of research (e.g., experimental, survey, case study)
- Data collection methods
- Analysis approaches
- Key methodological steps

Text:
{text}

Please provide a concise summary of the methodology."""

STATISTICAL_METHOD_PROMPT = """As a statistics expert, explain the following statistical method in detail: {method}

Please cover:
1. Definition and purpose
2. When to use it
3. Underlying assumptions
4. Calculation steps
5. How to interpret the results
6. Common pitfalls

Use plain language and give concrete examples where possible."""

_BOILERPLATE_RE = re.compile(
    r"^\s*(?:"
    r"here is the research methodology section|"
    r"i've extracted the research methodology section|"
    r"the research methodology section is as follows|"
    r"here is a concise summary of the methodology|"
    r"以下是研究方法部分|"
    r"研究方法部分如下|"
    r"提取的研究方法如下"
    r")\s*[:：]?\s*",
    re.IGNORECASE,
)

_NOTHING_FOUND = {"null", "none", "n/a", '"null"'}


def extraction_prompt(text: str) -> str:
    return EXTRACT_METHOD_PROMPT.format(text=text)


def summary_prompt(text: str) -> str:
    return SUMMARIZE_METHOD_PROMPT.format(text=text)


def statistical_method_prompt(method: str) -> str:
    return STATISTICAL_METHOD_PROMPT.format(method=method.strip())


def clean_answer(text: str) -> str:
    """Strip known lead-in phrases; an explicit "null" answer becomes ''."""
    cleaned = _BOILERPLATE_RE.sub("", text or "", count=1).strip()
    if cleaned.lower() in _NOTHING_FOUND:
        return ""
    return cleaned
