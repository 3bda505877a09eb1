from typing import Any


class PostboardError(Exception):
    pass


class ValidationError(PostboardError):
    '''Raised when submitted fields break one or more rules.

    ``errors`` maps each failing field to the name of the first rule it broke.
    '''

    def __init__(self, errors:dict[str, str]) -> None:
        self.errors : dict[str, str] = dict(errors)
        super().__init__(f'validation failed for: {", ".join(sorted(self.errors))}')


class NotFoundError(PostboardError):

    def __init__(self, model:str, record_id:Any) -> None:
        self.model : str = model
        self.record_id : Any = record_id
        super().__init__(f'{model} {record_id} not found')
