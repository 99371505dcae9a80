class TuffousError(Exception):
    pass


class NotFoundError(TuffousError):
    def __init__(self, todo_id: int, op: str | None = None):
        self.todo_id = todo_id
        self.op = op
        where = f" ({op})" if op else ""
        super().__init__(f"no todo with id {todo_id}{where}")


class ValidationError(TuffousError):
    pass


class ConflictError(TuffousError):
    pass


class LinkError(ConflictError):
    def __init__(self, parent: int, child: int, reason: str):
        self.parent = parent
        self.child = child
        self.reason = reason
        super().__init__(f"cannot link {parent} -> {child}: {reason}")


class StoreError(TuffousError):
    pass
