import sys
import json
import asyncio
import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape
from server_inventory.client import ApiClient
from server_inventory.config import get_settings
from server_inventory.controller import EditSurface, RecordController
from server_inventory.display import display_notices, display_server, display_servers
from server_inventory.exceptions import InventoryError
from server_inventory.session import SessionStore

settings = get_settings()
app = typer.Typer(no_args_is_help=True)


def _console():
    return Console()


def _fail(message: str):
    _console().print(f"[red]{escape(message)}[/red]")
    raise typer.Exit(1)


def _session_store(session_file: str) -> SessionStore:
    return SessionStore(session_file, ttl=settings.session_ttl)


def _require_session(store: SessionStore):
    """
    Gate for protected commands, the CLI equivalent of redirecting to the login page.
    """
    if not store.is_authenticated():
        _fail("Not logged in. Run `server-inventory login` first.")


def _finish(controller: RecordController):
    notices = controller.notices.drain()
    display_notices(notices)
    if any(notice.level == "error" for notice in notices):
        raise typer.Exit(1)


@app.callback()
def main(debug: bool = typer.Option(settings.debug, help="Enable debug logging")):
    """
    Manage the server inventory.
    """
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if debug else "WARNING")


def login(
    username: str = typer.Option(..., prompt=True, help="Account username"),
    password: str = typer.Option(..., prompt=True, hide_input=True, help="Account password"),
    api_url: str = typer.Option(settings.api_url, help="Inventory API base URL"),
    session_file: str = typer.Option(settings.session_file, help="Session storage path"),
):
    """
    Log in and store the session token.
    """
    store = _session_store(session_file)

    async def _login():
        try:
            response = await ApiClient(api_url, store).login(username, password)
        except InventoryError as exc:
            _fail(f"Login failed: {exc}")
        store.set_session(response.token, response.user.model_dump(mode="json"))
        _console().print("[green]Welcome back![/green]")

    asyncio.run(_login())


def register(
    username: str = typer.Option(..., prompt=True, help="Account username"),
    email: str = typer.Option(..., prompt=True, help="Account email"),
    password: str = typer.Option(
        ..., prompt=True, hide_input=True, confirmation_prompt=True, help="Account password"
    ),
    api_url: str = typer.Option(settings.api_url, help="Inventory API base URL"),
    session_file: str = typer.Option(settings.session_file, help="Session storage path"),
):
    """
    Create a new account; this does not log you in.
    """
    store = _session_store(session_file)

    async def _register():
        try:
            await ApiClient(api_url, store).register(username, email, password)
        except InventoryError as exc:
            _fail(f"Registration failed: {exc}")
        _console().print("[green]Registration successful! Please login.[/green]")

    asyncio.run(_register())


def logout(
    session_file: str = typer.Option(settings.session_file, help="Session storage path"),
):
    """
    Forget the stored session.
    """
    _session_store(session_file).clear_session()
    _console().print("[green]Logged out successfully[/green]")


def whoami(
    raw_json: bool = typer.Option(False, help="Display raw JSON output"),
    session_file: str = typer.Option(settings.session_file, help="Session storage path"),
):
    """
    Show the logged-in user.
    """
    store = _session_store(session_file)
    _require_session(store)
    user = store.get_user()
    if raw_json:
        print(json.dumps(user, indent=2))
    else:
        _console().print(f"Welcome, {escape(str(user.get('username')))}")


def health(
    api_url: str = typer.Option(settings.api_url, help="Inventory API base URL"),
    session_file: str = typer.Option(settings.session_file, help="Session storage path"),
):
    """
    Check that the API is up (no login needed).
    """

    async def _health():
        try:
            status = await ApiClient(api_url, _session_store(session_file)).health()
        except InventoryError as exc:
            _fail(f"Health check failed: {exc}")
        print(json.dumps(status, indent=2))

    asyncio.run(_health())


def list_servers(
    raw_json: bool = typer.Option(False, help="Display raw JSON output"),
    api_url: str = typer.Option(settings.api_url, help="Inventory API base URL"),
    session_file: str = typer.Option(settings.session_file, help="Session storage path"),
):
    """
    List every server record.
    """
    store = _session_store(session_file)
    _require_session(store)

    async def _list_servers():
        controller = RecordController(ApiClient(api_url, store))
        records = await controller.list()
        if controller.notices.items:
            _finish(controller)
        if raw_json:
            print(json.dumps([record.model_dump(mode="json") for record in records], indent=2))
        else:
            display_servers(records)

    asyncio.run(_list_servers())


def show_server(
    server_id: str = typer.Argument(..., help="Server record ID"),
    raw_json: bool = typer.Option(False, help="Display raw JSON output"),
    show_password: bool = typer.Option(False, help="Print the stored password in clear text"),
    api_url: str = typer.Option(settings.api_url, help="Inventory API base URL"),
    session_file: str = typer.Option(settings.session_file, help="Session storage path"),
):
    """
    Show a single server record.
    """
    store = _session_store(session_file)
    _require_session(store)

    async def _show_server():
        try:
            record = await RecordController(ApiClient(api_url, store)).get(server_id)
        except InventoryError as exc:
            _fail(f"Failed to fetch server: {exc}")
        if raw_json:
            print(json.dumps(record.model_dump(mode="json"), indent=2))
        else:
            display_server(record, show_password=show_password)

    asyncio.run(_show_server())


def _given(**values):
    return {key: value for key, value in values.items() if value is not None}


def add_server(
    project_name: str = typer.Option(None, help="Project name"),
    project_purpose: str = typer.Option(None, help="Project purpose"),
    environment: str = typer.Option(None, help="Development, Staging or Production"),
    vm_name: str = typer.Option(None, help="VM name"),
    cpu: str = typer.Option(None, help="CPU cores (default 1)"),
    ram: str = typer.Option(None, help="RAM in GB (default 1)"),
    storage: str = typer.Option(None, help="Storage in GB (default 10)"),
    total_cost: str = typer.Option(None, help="Total cost (default 0)"),
    os_version: str = typer.Option(None, help="OS version"),
    ip: str = typer.Option(None, help="IP address"),
    hostname: str = typer.Option(None, help="Hostname"),
    username: str = typer.Option(None, help="Login username on the VM"),
    password: str = typer.Option(None, help="Login password on the VM"),
    server_no: str = typer.Option(None, help="Server number"),
    created_by: str = typer.Option(None, help="Who requested/created the VM"),
    remarks: str = typer.Option(None, help="Free-form remarks"),
    delete_date: str = typer.Option(None, help="Planned deletion date (ISO 8601)"),
    api_url: str = typer.Option(settings.api_url, help="Inventory API base URL"),
    session_file: str = typer.Option(settings.session_file, help="Session storage path"),
):
    """
    Add a new server record.
    """
    store = _session_store(session_file)
    _require_session(store)
    values = _given(
        project_name=project_name,
        project_purpose=project_purpose,
        environment=environment,
        vm_name=vm_name,
        cpu=cpu,
        ram=ram,
        storage=storage,
        total_cost=total_cost,
        os_version=os_version,
        ip=ip,
        hostname=hostname,
        username=username,
        password=password,
        server_no=server_no,
        created_by=created_by,
        remarks=remarks,
        delete_date=delete_date,
    )

    async def _add_server():
        controller = RecordController(ApiClient(api_url, store))
        surface = EditSurface(controller)
        surface.open_create()
        try:
            surface.update_fields(values)
        except InventoryError as exc:
            _fail(str(exc))
        record = await surface.submit()
        _finish(controller)
        if record is not None:
            _console().print(f"Created server {escape(record.id)}")

    asyncio.run(_add_server())


def edit_server(
    server_id: str = typer.Argument(..., help="Server record ID"),
    project_name: str = typer.Option(None, help="Project name"),
    project_purpose: str = typer.Option(None, help="Project purpose"),
    environment: str = typer.Option(None, help="Development, Staging or Production"),
    vm_name: str = typer.Option(None, help="VM name"),
    cpu: str = typer.Option(None, help="CPU cores"),
    ram: str = typer.Option(None, help="RAM in GB"),
    storage: str = typer.Option(None, help="Storage in GB"),
    total_cost: str = typer.Option(None, help="Total cost"),
    os_version: str = typer.Option(None, help="OS version"),
    ip: str = typer.Option(None, help="IP address"),
    hostname: str = typer.Option(None, help="Hostname"),
    username: str = typer.Option(None, help="Login username on the VM"),
    password: str = typer.Option(None, help="Login password on the VM"),
    server_no: str = typer.Option(None, help="Server number"),
    created_by: str = typer.Option(None, help="Who requested/created the VM"),
    remarks: str = typer.Option(None, help="Free-form remarks"),
    delete_date: str = typer.Option(None, help="Planned deletion date (ISO 8601)"),
    api_url: str = typer.Option(settings.api_url, help="Inventory API base URL"),
    session_file: str = typer.Option(settings.session_file, help="Session storage path"),
):
    """
    Edit a server record.  Unspecified fields keep their current values, but the
    full record is always sent back.
    """
    store = _session_store(session_file)
    _require_session(store)
    values = _given(
        project_name=project_name,
        project_purpose=project_purpose,
        environment=environment,
        vm_name=vm_name,
        cpu=cpu,
        ram=ram,
        storage=storage,
        total_cost=total_cost,
        os_version=os_version,
        ip=ip,
        hostname=hostname,
        username=username,
        password=password,
        server_no=server_no,
        created_by=created_by,
        remarks=remarks,
        delete_date=delete_date,
    )

    async def _edit_server():
        controller = RecordController(ApiClient(api_url, store))
        try:
            current = await controller.get(server_id)
        except InventoryError as exc:
            _fail(f"Failed to fetch server: {exc}")
        surface = EditSurface(controller)
        surface.open_edit(current)
        try:
            surface.update_fields(values)
        except InventoryError as exc:
            _fail(str(exc))
        record = await surface.submit()
        _finish(controller)
        if record is not None:
            _console().print(f"Updated server {escape(record.id)}")

    asyncio.run(_edit_server())


def delete_server(
    server_id: str = typer.Argument(..., help="Server record ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
    api_url: str = typer.Option(settings.api_url, help="Inventory API base URL"),
    session_file: str = typer.Option(settings.session_file, help="Session storage path"),
):
    """
    Delete a server record, after confirmation.
    """
    store = _session_store(session_file)
    _require_session(store)

    def _confirm():
        return yes or typer.confirm("Are you sure you want to delete this server?")

    async def _delete_server():
        controller = RecordController(ApiClient(api_url, store))
        if not await controller.delete(server_id, confirm=_confirm):
            if not controller.notices.items:
                _console().print("Aborted.")
                return
        _finish(controller)

    asyncio.run(_delete_server())


app.command(name="login", help="Log in to the inventory API")(login)
app.command(name="register", help="Register a new account")(register)
app.command(name="logout", help="Clear the stored session")(logout)
app.command(name="whoami", help="Show the logged-in user")(whoami)
app.command(name="health", help="Check API health")(health)
app.command(name="list", help="List server records")(list_servers)
app.command(name="show", help="Show a single server record")(show_server)
app.command(name="add", help="Add a new server record")(add_server)
app.command(name="edit", help="Edit an existing server record")(edit_server)
app.command(name="delete", help="Delete a server record")(delete_server)


if __name__ == "__main__":
    app()
