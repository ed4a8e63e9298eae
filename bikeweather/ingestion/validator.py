from typing import Any, Dict, Optional, Tuple, Type
from pydantic import BaseModel, ValidationError

class DataValidator:
    def __init__(self, model: Type[BaseModel]):
        self.model = model

    def validate(self, record: Dict[str, Any]) -> Tuple[Optional[BaseModel], str]:
        try:
            return self.model(**record), ""
        except ValidationError as e:
            return None, str(e)
