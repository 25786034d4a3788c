"""Prompt templates for questions over saved items."""

from __future__ import annotations

SYSTEM_PROMPT = "You are a helpful and friendly assistant."

GROUNDED_PROMPT_TEMPLATE = """\
You are given the user's currently filtered WebStash items as JSON Lines (one JSON object per line).
Each object has: id, title, tags[], content (snippet), createdAt, type.

Use ONLY this dataset to answer the question.
If the question implies aggregation (e.g., "favorite hashtag"), compute it from the dataset
(e.g., count tag frequency and pick the most frequent). If insufficient, say so briefly.

DATASET (JSONL):
{dataset}

QUESTION:
{question}

TASK:
1) Answer concisely using only the DATASET.
2) Include a short "Based on:" line citing tag(s) or id(s) used."""


def build_grounded_prompt(dataset: str, question: str) -> str:
    """Embed the dataset and question in the fixed grounded template."""
    return GROUNDED_PROMPT_TEMPLATE.format(dataset=dataset, question=question)
