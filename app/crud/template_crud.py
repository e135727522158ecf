from typing import List, Optional

from sqlalchemy.orm import Session

from app.models.course.template_model import Template


def create_template(db: Session, *, name: str, format_order: List[str], description: str | None = None) -> Template:
    db_template = Template(name=name, format_order=list(format_order), description=description)
    db.add(db_template)
    db.commit()
    db.refresh(db_template)
    return db_template


def get_template(db: Session, template_id: int) -> Optional[Template]:
    return db.get(Template, template_id)
