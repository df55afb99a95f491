"""
Seed a small sample catalog (categories, sub-categories and quizzes) into MongoDB.

What it does
- Creates course and exam root categories with a couple of sub-categories each
- Adds one sample quiz with five questions under every sub-category
- Goes through the service layer, so levels, question orders and locks are derived as in the API
- Does nothing when categories already exist

How to run:
1) Ensure MongoDB is reachable per your `.env` (QUIZPREP_MONGO_URI/QUIZPREP_MONGO_DB_NAME)
2) python data_scripts/seed_sample_data.py
"""

import os
import sys
from typing import Any, Dict, List

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from quizprep.db.session import Database  # type: ignore
from quizprep.schemas.category import CategoryCreate, CategoryType  # type: ignore
from quizprep.schemas.quiz import OptionDoc, QuestionCreate, QuizCreate  # type: ignore
from quizprep.services.category_service import create_category  # type: ignore
from quizprep.services.quiz_service import create_quiz  # type: ignore

CATALOG: List[Dict[str, Any]] = [
    {
        "name": "Mathematics",
        "type": CategoryType.course,
        "description": "Learn mathematics concepts from basic to advanced",
        "children": ["Algebra", "Geometry"],
    },
    {
        "name": "Science",
        "type": CategoryType.course,
        "description": "Physics, Chemistry, and Biology concepts",
        "children": ["Physics", "Chemistry"],
    },
    {
        "name": "Banking Exams",
        "type": CategoryType.exam,
        "description": "Prepare for IBPS, SBI, and other banking entrance exams",
        "children": ["IBPS PO", "SBI Clerk"],
    },
    {
        "name": "Civil Services",
        "type": CategoryType.exam,
        "description": "UPSC and state civil services exam preparation",
        "children": ["UPSC Prelims"],
    },
]

DIFFICULTIES = ["medium", "easy", "hard", "medium", "easy"]


def sample_questions(topic: str) -> List[QuestionCreate]:
    options = [OptionDoc(id=opt, text=f"Option {opt}") for opt in "ABCD"]
    return [
        QuestionCreate(
            text=f"Sample question {idx + 1} for {topic}?",
            options=options,
            correct_option_id="ABCD"[idx % 4],
            explanation=f"This is the explanation for the correct answer {'ABCD'[idx % 4]}",
            difficulty=DIFFICULTIES[idx],
        )
        for idx in range(5)
    ]


def main():
    db = Database()
    if db.list_categories():
        print(f"Database '{db.db_name}' already has categories; nothing to seed.")
        return

    quiz_index = 0
    for order, root in enumerate(CATALOG, start=1):
        parent = create_category(
            CategoryCreate(name=root["name"], type=root["type"], description=root["description"], order=order), db
        )
        print(f"✅ {parent.type:<6} {parent.name}")
        for child_order, child_name in enumerate(root["children"], start=1):
            child = create_category(
                CategoryCreate(name=child_name, type=root["type"], parent_category=parent.id, order=child_order), db
            )
            quiz = create_quiz(
                QuizCreate(
                    name=f"{child_name} Mock Test",
                    description=f"Test your knowledge on {child_name} concepts",
                    duration=30,
                    total_questions=5,
                    category_id=child.id,
                    questions=sample_questions(child_name),
                    # every third quiz is free
                    price=0 if quiz_index % 3 == 0 else 99,
                    tags=["sample", child_name.lower()],
                ),
                db,
            )
            quiz_index += 1
            print(f"   └─ {child.name} (level {child.level}) → quiz {quiz.id} locked={quiz.is_locked}")

    db.close()
    print("\nDone.")


if __name__ == "__main__":
    main()
