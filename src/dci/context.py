"""
Context: stateless use-case orchestrator.

A subclass declares the capability interfaces its participants must conform
to, in call order, and implements interact() to start the interaction with a
single role call:

    class TransferCtx(Context):
        participants = (MONEY_SOURCE, MONEY_SINK)

        def interact(self, source, sink, amount):
            return source.transfer_funds(sink, amount)

execute() checks the call before anything runs, then passes every result and
every error through untouched.
"""

from __future__ import annotations

import contextlib
from typing import Any, ClassVar, Iterator, Optional, Tuple

from dci.capability import CapabilityInterface
from dci.data import DataObject
from dci.errors import ContextUsageError


@contextlib.contextmanager
def hold_guards(*participants: DataObject) -> Iterator[None]:
    """
    Hold every participant's guard for the duration of the block.

    Locks are taken in id() order so two contexts over the same objects cannot
    deadlock. Repeated participants are locked once.
    """
    unique = {id(p): p for p in participants}
    with contextlib.ExitStack() as stack:
        for key in sorted(unique):
            stack.enter_context(unique[key].guard)
        yield


class Context:
    participants: ClassVar[Tuple[CapabilityInterface, ...]] = ()
    # None: follow DCIConfig.serialize_participants of the participants' dispatchers.
    serialize_participants: ClassVar[Optional[bool]] = None

    def _check(self, args: Tuple[Any, ...]) -> Tuple[Tuple[DataObject, ...], Tuple[Any, ...]]:
        n = len(self.participants)
        name = type(self).__name__
        if len(args) < n:
            raise ContextUsageError(f"{name}.execute expects {n} participants, got {len(args)} arguments")

        players, rest = args[:n], args[n:]
        for i, (iface, player) in enumerate(zip(self.participants, players)):
            if not isinstance(player, DataObject):
                raise ContextUsageError(f"{name}: participant {i} must be a DataObject, got {type(player).__name__}")
            if not type(player).conforms_to(iface):
                raise ContextUsageError(f"{name}: participant {i} ({type(player).__name__}) does not conform to {iface.name}")
        return players, rest

    def _serialized(self, players: Tuple[DataObject, ...]) -> bool:
        if self.serialize_participants is not None:
            return self.serialize_participants
        # Any participant whose dispatcher asks for serialization turns it on.
        return any(type(p)._dispatcher().config.serialize_participants for p in players)

    def execute(self, *args: Any, **kwargs: Any) -> Any:
        players, rest = self._check(args)
        if not self._serialized(players):
            return self.interact(*players, *rest, **kwargs)
        with hold_guards(*players):
            return self.interact(*players, *rest, **kwargs)

    def interact(self, *args: Any, **kwargs: Any) -> Any:
        raise NotImplementedError(f"{type(self).__name__}.interact is not implemented")
