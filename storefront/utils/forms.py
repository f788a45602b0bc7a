# storefront/utils/forms.py

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..core.error_handlers import format_validation_errors
from ..core.middleware.csrf import CSRF_FORM_FIELD

logger = logging.getLogger(__name__)

FormModel = TypeVar("FormModel", bound=BaseModel)


def form_values(form: Mapping[str, Any]) -> Dict[str, str]:
    """Submitted text fields, for re-filling the form after a failed submit."""
    return {
        key: value for key, value in form.items()
        if isinstance(value, str) and key != CSRF_FORM_FIELD
    }


def validate_form(
    model: Type[FormModel], form: Mapping[str, Any]
) -> Tuple[Optional[FormModel], List[Dict[str, Any]]]:
    """
    Validate submitted form fields against a pydantic model.

    Returns the model and an empty list, or ``None`` and one error per field.
    Models may declare ``field_messages`` to replace pydantic's wording.
    """
    try:
        return model.model_validate(form_values(form)), []
    except ValidationError as e:
        errors = format_validation_errors(e.errors())
        messages = getattr(model, "field_messages", {})
        for error in errors:
            if error["type"] != "password_mismatch" and error["field"] in messages:
                error["message"] = messages[error["field"]]
        logger.info(f"{model.__name__} rejected: {[error['field'] for error in errors]}")
        return None, errors
