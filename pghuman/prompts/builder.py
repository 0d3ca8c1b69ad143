from __future__ import annotations

from typing import List

from pghuman.prompts.contracts import ChatTurn
from pghuman.schema.render import render_expanded
from pghuman.schema.types import SchemaDescription

SYSTEM_PROMPT = "You are a PostgreSQL expert"

SCHEMA_PROMPT = "My Postgres database schema looks like this:\n{schema}."

QUESTION_PROMPT = (
    "Given that schema, could you give me a PostgreSQL query to do the "
    "following action: {question}.\n"
    " Only respond with the SQL code, so no other additional text. "
    "Only use the tables and columns provided in the schema."
)


class PromptBuilder:
    name = "prompt"

    def build(self, description: SchemaDescription, question: str) -> List[ChatTurn]:
        """
        Return the three chat turns, always in this order:
        system persona, schema (expanded rendering), question.

        The schema is passed through in full whatever its size.
        """
        return [
            ChatTurn(role="system", content=SYSTEM_PROMPT),
            ChatTurn(
                role="user",
                content=SCHEMA_PROMPT.format(schema=render_expanded(description)),
            ),
            ChatTurn(role="user", content=QUESTION_PROMPT.format(question=question)),
        ]
