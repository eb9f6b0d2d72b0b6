"""
Rich rendering for records and notices.
"""

from typing import List, Optional
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from server_inventory.controller import Notice
from server_inventory.schemas import ServerRecord

ENVIRONMENT_STYLES = {
    "Production": "red",
    "Staging": "yellow",
    "Development": "green",
}


def format_date(value) -> str:
    """
    Format a datetime (or None) for table cells.
    """
    if value is None:
        return "-"
    return value.strftime("%Y-%m-%d %H:%M")


def format_environment(environment: str) -> str:
    style = ENVIRONMENT_STYLES.get(environment)
    if not style:
        return escape(environment or "-")
    return f"[{style}]{environment}[/{style}]"


def display_servers(records: List[ServerRecord], console: Optional[Console] = None):
    """
    Render the server list as a single table.
    """
    console = console or Console()
    if not records:
        console.print("No servers found. Add your first server to get started.")
        return
    table = Table(title="Servers", box=box.ROUNDED)
    table.add_column("ID", style="cyan")
    table.add_column("Project")
    table.add_column("Environment")
    table.add_column("VM Details")
    table.add_column("Resources")
    table.add_column("Network")
    table.add_column("Cost", justify="right", style="green")
    for record in records:
        table.add_row(
            escape(record.id),
            f"{escape(record.project_name)}\n[dim]{escape(record.project_purpose)}[/dim]",
            format_environment(record.environment),
            f"{escape(record.vm_name)}\n[dim]{escape(record.os_version)}[/dim]",
            f"CPU: {record.cpu} cores\nRAM: {record.ram} GB\nStorage: {record.storage} GB",
            f"{escape(record.ip)}\n[dim]{escape(record.hostname)}[/dim]",
            f"${record.total_cost:.2f}",
        )
    console.print(table)


def display_server(
    record: ServerRecord, show_password: bool = False, console: Optional[Console] = None
):
    """
    Render a single record as a property/value table.
    """
    console = console or Console()
    table = Table(title=f"Server: {escape(record.vm_name or record.id)}", box=box.ROUNDED)
    table.add_column("Property", style="cyan")
    table.add_column("Value")
    table.add_row("ID", escape(record.id))
    table.add_row("Project", escape(record.project_name))
    table.add_row("Purpose", escape(record.project_purpose))
    table.add_row("Environment", format_environment(record.environment))
    table.add_row("VM Name", escape(record.vm_name))
    table.add_row("OS Version", escape(record.os_version))
    table.add_row("CPU", f"{record.cpu} cores")
    table.add_row("RAM", f"{record.ram} GB")
    table.add_row("Storage", f"{record.storage} GB")
    table.add_row("Total Cost", f"${record.total_cost:.2f}")
    table.add_row("IP Address", escape(record.ip))
    table.add_row("Hostname", escape(record.hostname))
    table.add_row("Username", escape(record.username))
    table.add_row("Password", escape(record.password) if show_password else "********")
    table.add_row("Server No", escape(record.server_no))
    table.add_row("Created By", escape(record.created_by))
    table.add_row("Remarks", escape(record.remarks or "-"))
    table.add_row("Delete Date", format_date(record.delete_date))
    table.add_row("Created", format_date(record.created_at))
    table.add_row("Updated", format_date(record.updated_at))
    console.print(table)


def display_notices(notices: List[Notice], console: Optional[Console] = None):
    console = console or Console()
    for notice in notices:
        color = "green" if notice.level == "success" else "red"
        console.print(f"[{color}]{escape(notice.message)}[/{color}]")
