"""A doubly linked list whose nodes are owned by the caller."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Optional


@dataclass(eq=False)
class ListNode:
    """A list node carrying an arbitrary value."""

    value: Any = None
    pre: Optional["ListNode"] = field(default=None, repr=False)
    next: Optional["ListNode"] = field(default=None, repr=False)


class LinkedList:
    """A list with head and tail pointers and a node count."""

    def __init__(self) -> None:
        self._first: Optional[ListNode] = None
        self._last: Optional[ListNode] = None
        self._count = 0

    def __len__(self) -> int:
        return self._count

    def __iter__(self) -> Iterator[ListNode]:
        node = self._first
        while node is not None:
            following = node.next
            yield node
            node = following

    def first(self) -> Optional[ListNode]:
        return self._first

    def last(self) -> Optional[ListNode]:
        return self._last

    def insert_first(self, node: ListNode) -> None:
        node.next = self._first
        node.pre = None
        if self._count == 0:
            self._first = self._last = node
        else:
            self._first.pre = node
            self._first = node
        self._count += 1

    def insert_last(self, node: ListNode) -> None:
        node.pre = self._last
        node.next = None
        if self._count == 0:
            self._first = self._last = node
        else:
            self._last.next = node
            self._last = node
        self._count += 1

    def remove_first(self) -> Optional[ListNode]:
        """Detach and return the head node, or None if the list is empty."""
        if self._count == 0:
            return None
        node = self._first
        self._first = node.next
        if self._first is None:
            self._last = None
        else:
            self._first.pre = None
        node.pre = node.next = None
        self._count -= 1
        return node

    def remove(self, node: ListNode) -> ListNode:
        """Detach ``node``, which must belong to this list, and return it."""
        if node is self._first:
            self._first = node.next
        if node is self._last:
            self._last = node.pre
        if node.pre is not None:
            node.pre.next = node.next
        if node.next is not None:
            node.next.pre = node.pre
        node.pre = node.next = None
        self._count -= 1
        return node