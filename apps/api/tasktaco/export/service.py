from __future__ import annotations

import json
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from tasktaco.boards.service import load_board_tree
from tasktaco.models import Board, as_utc

PRD_SECTIONS = (
  "**Executive Summary** - Overview of the project scope",
  "**User Stories** - Derived from the task titles and descriptions",
  "**Feature Requirements** - Functional requirements based on column organization",
  "**Technical Specifications** - Architecture recommendations",
  "**Success Metrics** - KPIs and acceptance criteria",
  "**Implementation Timeline** - Suggested development phases",
)


async def board_snapshot(db: AsyncSession, *, board: Board) -> dict[str, Any]:
  tree = await load_board_tree(db, board=board)
  return {
    "id": board.id,
    "name": board.name,
    "description": board.description,
    "columns": [
      {
        "id": c.id,
        "name": c.name,
        "order": c.order,
        "tasks": [
          {
            "id": t.id,
            "title": t.title,
            "description": t.description,
            "order": t.order,
            "dueDate": as_utc(t.due_date).isoformat() if t.due_date else None,
            "priority": t.priority,
            "status": t.status,
            "labels": list(t.labels or []),
          }
          for t in tasks
        ],
      }
      for c, tasks in tree
    ],
  }


def prd_prompt(board_name: str, board_description: str | None, json_data: str) -> str:
  desc = (board_description or "").strip() or "(none provided)"
  sections = "\n".join(f"{idx}. {s}" for idx, s in enumerate(PRD_SECTIONS, start=1))
  return f"""# AI PRD Generation Request

## Context
I'm working on a Kanban project management tool called TaskTaco. I need you to analyze the current board state and generate a comprehensive Product Requirements Document (PRD).

## Current Board Data
Board Name: {board_name}
Board Description: {desc}

```json
{json_data}
```

## Instructions
Based on the board structure and tasks above, please generate a PRD that includes:

{sections}

## Output Format
Please structure your response as a professional PRD document with clear sections, bullet points, and actionable requirements that a development team could implement. The output should be formatted so it can be easily copied and saved as a PDF by the user.

## Additional Context
- Focus on individual productivity, not team collaboration
"""


async def export_board(db: AsyncSession, *, board: Board) -> tuple[str, str]:
  """Return ``(json_text, prompt)`` for ``board``."""
  json_data = json.dumps(await board_snapshot(db, board=board), indent=2, ensure_ascii=False)
  return json_data, prd_prompt(board.name, board.description, json_data)
