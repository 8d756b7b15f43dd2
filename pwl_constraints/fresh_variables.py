from __future__ import annotations


class VariableAllocator:
    """
    Hands out fresh variable ids for one solving session.

    Ids are strictly increasing, starting at ``first``; pass ``first`` past
    the model's own variables so fresh ids never collide with them.
    """

    def __init__(self, first: int = 0):
        if first < 0:
            raise ValueError(f"Variable ids must be non-negative, got {first}")
        self._next = first

    def get_next_variable(self) -> int:
        variable = self._next
        self._next += 1
        return variable
