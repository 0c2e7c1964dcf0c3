# catering/utils/errors.py

"""
Три вида ошибок бизнес-логики.
Наследуются от HTTPException, поэтому FastAPI сам отдаёт нужный статус:
    NotFoundError     → 404  (заказ, платёж, доставка, клиент или меню не существует)
    InvalidInputError → 400  (некорректные данные или нарушение бизнес-правила)
    ConflictError     → 409  (недопустимый переход статуса, дубликат, запрет удаления)
"""

from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class InvalidInputError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class ConflictError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)
