"""Adversarial tests — callers bypassing the event form.

The form only offers eligible event types, but a caller can call the
service directly.  Every role/event combination outside the registry must
be refused with ``Unauthorized`` and must never reach the ledger.
"""

from __future__ import annotations

import itertools

import pytest

from agritrace.core.errors import Unauthorized
from agritrace.core.registry import eligible_event_types
from agritrace.models.events import EventType, Role

_FORBIDDEN = [
    (role, et)
    for role, et in itertools.product([*Role, None, 0, 99], EventType)
    if et not in {o.event_type for o in eligible_event_types(role)}
]


class TestRoleBypass:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("role,event_type", _FORBIDDEN)
    async def test_forbidden_combination_never_writes(
        self, make_service, fake_gateway, role, event_type
    ):
        service = make_service(role)
        await service.connect()
        with pytest.raises(Unauthorized):
            await service.record_event(42, event_type, '{"notes":"forged"}')
        assert fake_gateway.writes == []

    @pytest.mark.asyncio
    async def test_role_cannot_be_smuggled_in_payload(self, make_service, fake_gateway):
        """The payload's role field is data, not a credential."""
        service = make_service(Role.RETAILER)
        await service.connect()
        with pytest.raises(Unauthorized):
            await service.record_event(42, EventType.PROCESSING, '{"role":2}')
        assert fake_gateway.writes == []
