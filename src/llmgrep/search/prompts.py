"""Prompt templates sent to the oracle."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Sequence

FILENAME_SYSTEM_PROMPT = """You are a highly accurate filename analysis tool. Your task is to analyze filenames and estimate the probability they contain content matching a search query.

Instructions:
1. Evaluate each filename considering:
   - Naming conventions and semantics
   - File extensions and their typical content
   - Common code/documentation patterns
   - Word matches and related concepts
2. Assign a score from 0.0 (irrelevant) to 1.0 (highly relevant)
3. Return ONLY valid JSON: an object with a 'filenames' array of objects with 'filename' and 'score' fields, nothing else

Example:
Input: ['main.py', 'auth.py'] with query 'authentication'
Output: {"filenames": [{"filename": "main.py", "score": 0.3}, {"filename": "auth.py", "score": 0.9}]}"""

ANALYSIS_SYSTEM_PROMPT = """You are a highly accurate semantic search function. Your task is to analyze text and determine if it contains information semantically related to a search query.

Instructions:
1. Carefully analyze the semantic meaning and context, not just exact keyword matches
2. Consider related concepts, implications, and domain-specific terminology
3. If relevant information is found, explain the relationship briefly and precisely
4. If no relevant information exists, set has_match to false

Respond with a JSON object matching this structure:
{
    "has_match": boolean,
    "analysis": string | null
}

Example input: Text about 'database indexing' with query 'performance optimization'
Example response: {"has_match": true, "analysis": "Discusses B-tree indexes which improve query performance by reducing disk I/O"}

Remember: Be concise, objective, and focus on semantic relevance rather than surface-level matches."""


def filename_prompt(filenames: Sequence[str], query: str) -> str:
    return (
        f"Analyze these filenames: {json.dumps(list(filenames), indent=2)}\n"
        f"Query: '{query}'\n\n"
        "Respond with ONLY JSON. Example format: "
        '{"filenames": [{"filename": "example.py", "score": 0.5}]}'
    )


def analysis_prompt(path: Path, chunk: str, query: str) -> str:
    return (
        f"Filename: {path}\n"
        f"Text:\n{chunk}\n\n"
        f"Does the user query '{query}' relate to the above text? "
        "Respond with a JSON object containing has_match and analysis fields."
    )
