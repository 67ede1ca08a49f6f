"""
Action result schema

Every server action answers with this shape instead of raising.
"""
from typing import Dict, List, Optional

from pydantic import BaseModel


class ActionResult(BaseModel):
    success: bool
    message: Optional[str] = None
    field_errors: Optional[Dict[str, List[str]]] = None
    error_code: Optional[str] = None
    order_id: Optional[str] = None

    @classmethod
    def ok(cls, message: str, **kwargs) -> "ActionResult":
        return cls(success=True, message=message, **kwargs)

    @classmethod
    def fail(cls, message: Optional[str] = None, **kwargs) -> "ActionResult":
        return cls(success=False, message=message, **kwargs)
