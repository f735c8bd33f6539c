"""
State machine and result boundary tests.
"""

import pytest

from bakery.services.errors import InvalidStateError, NotFoundError
from bakery.services.results import ActionResult, action_boundary
from bakery.services.workflow import APPROVAL_MACHINE, BATCH_MACHINE, TRANSFER_MACHINE


class TestTransferMachine:

    @pytest.mark.parametrize(
        "current,target",
        [
            ("pending", "active"),
            ("pending", "completed"),
            ("pending", "cancelled"),
            ("active", "pending_return"),
            ("active", "completed"),
            ("pending_return", "return_completed"),
            ("pending_return", "active"),
        ],
    )
    def test_allowed(self, current, target):
        assert TRANSFER_MACHINE.can(current, target)

    @pytest.mark.parametrize(
        "current,target",
        [
            ("completed", "active"),
            ("cancelled", "active"),
            ("return_completed", "active"),
            ("active", "cancelled"),
            ("pending", "return_completed"),
        ],
    )
    def test_rejected(self, current, target):
        assert not TRANSFER_MACHINE.can(current, target)

    def test_states_cover_every_status(self):
        assert TRANSFER_MACHINE.states == {
            "pending", "active", "completed", "cancelled", "pending_return", "return_completed",
        }

    def test_require_raises_with_details(self):
        with pytest.raises(InvalidStateError) as exc_info:
            TRANSFER_MACHINE.require("completed", "active")

        assert exc_info.value.details == {"current": "completed", "target": "active"}
        assert str(exc_info.value) == "Cannot move transfer from completed to active."


class TestOtherMachines:

    def test_batch_terminal_states(self):
        assert BATCH_MACHINE.can("pending_approval", "in_production")
        assert BATCH_MACHINE.can("in_production", "completed")
        assert not BATCH_MACHINE.can("in_production", "cancelled")
        assert not BATCH_MACHINE.can("declined", "in_production")

    def test_approval_is_one_shot(self):
        assert APPROVAL_MACHINE.can("pending", "approved")
        assert not APPROVAL_MACHINE.can("approved", "declined")


class TestActionBoundary:

    def test_wraps_dict_as_success(self, app):
        @action_boundary("do something")
        def op():
            return {"value": 3}

        result = op()

        assert result == ActionResult(success=True, data={"value": 3})
        assert result.to_dict() == {"success": True, "value": 3}

    def test_converts_workflow_error(self, app):
        @action_boundary("do something")
        def op():
            raise NotFoundError("Nothing here.")

        result = op()

        assert result.to_dict() == {"success": False, "error": "Nothing here.", "error_code": "not_found"}

    def test_passes_results_through(self, app):
        @action_boundary("do something")
        def op():
            return ActionResult.failure("Declined by gateway.", "payment_gateway_error")

        assert op().error == "Declined by gateway."
