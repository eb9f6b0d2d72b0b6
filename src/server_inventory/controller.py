"""
Record list state, mirrored from the API, plus the create/edit form state machine.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union
from loguru import logger
from server_inventory.client import ApiClient
from server_inventory.constants import DEFAULT_DRAFT, NUMERIC_FIELDS
from server_inventory.exceptions import (
    EditSurfaceStateError,
    InventoryError,
    RecordValidationError,
)
from server_inventory.schemas import ServerFields, ServerRecord, validate


@dataclass
class Notice:
    level: str
    message: str


@dataclass
class Notices:
    """
    Transient operator-facing messages (success/error), newest last.
    """

    items: List[Notice] = field(default_factory=list)

    def success(self, message: str):
        logger.info(message)
        self.items.append(Notice("success", message))

    def error(self, message: str):
        logger.warning(message)
        self.items.append(Notice("error", message))

    def drain(self) -> List[Notice]:
        items, self.items = self.items, []
        return items


def coerce_field(name: str, value: Any) -> Any:
    """
    Coerce raw form input: cpu/ram/storage to int, total_cost to float, everything else stays text.
    """
    if name not in NUMERIC_FIELDS:
        return "" if value is None else str(value)
    caster = NUMERIC_FIELDS[name]
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return caster(0)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise RecordValidationError([f"{name}: must be a number, got {value!r}"])
    if caster is int:
        if not number.is_integer():
            raise RecordValidationError([f"{name}: must be a whole number, got {value!r}"])
        return int(number)
    return number


class RecordController:
    """
    Mutate, then refetch: the local list is only ever replaced wholesale by a
    successful list() call, never patched in place.
    """

    def __init__(self, client: ApiClient, notices: Optional[Notices] = None):
        self.client = client
        self.notices = notices if notices is not None else Notices()
        self.records: List[ServerRecord] = []

    async def list(self) -> List[ServerRecord]:
        try:
            records = await self.client.list_servers()
        except InventoryError as exc:
            self.notices.error(f"Failed to fetch servers: {exc}")
            return self.records
        self.records = records
        return self.records

    async def get(self, server_id: str) -> ServerRecord:
        return await self.client.get_server(server_id)

    async def create(self, fields: Union[Dict[str, Any], ServerFields]) -> ServerRecord:
        server_fields = self._validated(fields)
        record = await self.client.create_server(server_fields)
        self.notices.success("Server created successfully")
        await self.list()
        return record

    async def update(
        self, server_id: str, fields: Union[Dict[str, Any], ServerFields]
    ) -> ServerRecord:
        server_fields = self._validated(fields)
        record = await self.client.update_server(server_id, server_fields)
        self.notices.success("Server updated successfully")
        await self.list()
        return record

    async def delete(self, server_id: str, confirm: Union[bool, Callable[[], bool]]) -> bool:
        """
        Delete a record, only after `confirm` (a flag or a prompt callable) says yes.
        """
        confirmed = confirm() if callable(confirm) else confirm
        if confirmed is not True:
            logger.debug(f"Delete of {server_id} not confirmed, skipping")
            return False
        try:
            await self.client.delete_server(server_id)
        except InventoryError as exc:
            self.notices.error(f"Failed to delete server: {exc}")
            return False
        self.notices.success("Server deleted successfully")
        await self.list()
        return True

    @staticmethod
    def _validated(fields: Union[Dict[str, Any], ServerFields]) -> ServerFields:
        if isinstance(fields, ServerFields):
            return fields
        return validate(ServerFields, fields)


class SurfaceState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    SUBMITTING = "submitting"


class SurfaceMode(str, Enum):
    CREATE = "create"
    EDIT = "edit"


class EditSurface:
    """
    Closed -> Open(mode, draft) -> Submitting -> Closed on success, or back to
    Open with the draft intact on failure.
    """

    def __init__(self, controller: RecordController):
        self.controller = controller
        self.state = SurfaceState.CLOSED
        self.mode: Optional[SurfaceMode] = None
        self.record_id: Optional[str] = None
        self.draft: Dict[str, Any] = {}

    def _require(self, *states: SurfaceState):
        if self.state not in states:
            raise EditSurfaceStateError(
                f"edit surface is {self.state.value}, expected {'/'.join(s.value for s in states)}"
            )

    def open_create(self):
        self._require(SurfaceState.CLOSED)
        self.mode = SurfaceMode.CREATE
        self.record_id = None
        self.draft = dict(DEFAULT_DRAFT)
        self.state = SurfaceState.OPEN

    def open_edit(self, record: ServerRecord):
        self._require(SurfaceState.CLOSED)
        self.mode = SurfaceMode.EDIT
        self.record_id = record.id
        self.draft = {**DEFAULT_DRAFT, **record.fields()}
        self.state = SurfaceState.OPEN

    def set_field(self, name: str, value: Any):
        self._require(SurfaceState.OPEN)
        if name not in ServerFields.model_fields:
            raise RecordValidationError([f"{name}: unknown field"])
        if name == "delete_date":
            self.draft[name] = value or None
            return
        self.draft[name] = coerce_field(name, value)

    def update_fields(self, values: Dict[str, Any]):
        """
        Apply several field changes at once; nothing is applied if any of them fails to coerce.
        """
        self._require(SurfaceState.OPEN)
        staged = dict(self.draft)
        original, self.draft = self.draft, staged
        try:
            for name, value in values.items():
                self.set_field(name, value)
        except RecordValidationError:
            self.draft = original
            raise

    async def submit(self) -> Optional[ServerRecord]:
        self._require(SurfaceState.OPEN)
        self.state = SurfaceState.SUBMITTING
        try:
            if self.mode is SurfaceMode.EDIT:
                record = await self.controller.update(self.record_id, self.draft)
            else:
                record = await self.controller.create(self.draft)
        except InventoryError as exc:
            self.controller.notices.error(f"Failed to save server: {exc}")
            self.state = SurfaceState.OPEN
            return None
        self._reset()
        return record

    def close(self):
        if self.state is SurfaceState.SUBMITTING:
            raise EditSurfaceStateError("cannot close while a submission is in flight")
        self._reset()

    def _reset(self):
        self.state = SurfaceState.CLOSED
        self.mode = None
        self.record_id = None
        self.draft = {}
