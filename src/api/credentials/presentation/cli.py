"""``c8y-mcp creds`` commands for managing stored tenant credentials.

Each command takes the store and a rich console and returns a process exit
code, so the argparse entry point stays a thin dispatcher.
"""

from urllib.parse import urlsplit

from rich import box
from rich.console import Console
from rich.prompt import Confirm, Prompt
from rich.table import Table

from credentials.ports.exceptions import CredentialStoreError
from credentials.ports.repositories import ICredentialStore
from shared_kernel.auth.credentials import BasicCredential
from shared_kernel.auth.exceptions import CorruptionError, NotFoundError
from shared_kernel.auth.tenant_url import normalize_tenant_url


def is_valid_tenant_url(value: str) -> bool:
    parts = urlsplit(value.strip())
    return parts.scheme in ("http", "https") and bool(parts.hostname)


def _credentials_table(stored: list[BasicCredential], numbered: bool = False) -> Table:
    table = Table(box=box.SIMPLE, padding=(0, 1))
    if numbered:
        table.add_column("#", style="dim", justify="right")
    table.add_column("Tenant URL", style="cyan")
    table.add_column("User", style="green")
    for index, credential in enumerate(stored, start=1):
        row = [credential.tenant_url, credential.user]
        table.add_row(*([str(index), *row] if numbered else row))
    return table


def add_credential(store: ICredentialStore, console: Console) -> int:
    """Prompt for a tenant URL, user and password and store them."""
    console.print("[bold cyan]Add Cumulocity credentials[/bold cyan]")

    tenant_url = Prompt.ask(
        "Tenant URL (e.g. https://my-tenant.cumulocity.com)", console=console
    )
    if not is_valid_tenant_url(tenant_url):
        console.print(f"[bold red]Error:[/bold red] Invalid tenant URL: {tenant_url}")
        return 1
    tenant_url = normalize_tenant_url(tenant_url)

    user = Prompt.ask("Username", console=console).strip()
    if not user:
        console.print("[bold red]Error:[/bold red] Username is required")
        return 1
    password = Prompt.ask("Password", password=True, console=console)
    if not password:
        console.print("[bold red]Error:[/bold red] Password is required")
        return 1

    if _has_credential(store, tenant_url) and not Confirm.ask(
        f"Credentials for {tenant_url} already exist. Overwrite?",
        default=False,
        console=console,
    ):
        console.print("[yellow]Cancelled[/yellow]")
        return 0

    try:
        store.save(BasicCredential(user=user, password=password, tenant_url=tenant_url))
    except CredentialStoreError as e:
        console.print(f"[bold red]Error:[/bold red] Could not store credentials: {e}")
        return 1

    console.print(f"[green]✓[/green] Stored credentials for {tenant_url}")
    return 0


def list_credentials(store: ICredentialStore, console: Console) -> int:
    """Print every stored tenant URL and user. Passwords are never printed."""
    try:
        stored = store.list_all()
    except CredentialStoreError as e:
        console.print(f"[bold red]Error:[/bold red] Could not read credentials: {e}")
        return 1
    if not stored:
        console.print("[yellow]No stored credentials found.[/yellow]")
        return 0

    console.print(_credentials_table(stored))
    return 0


def remove_credentials(
    store: ICredentialStore, tenant_urls: list[str], console: Console
) -> int:
    """Remove credentials for the given tenants, or pick them interactively."""
    if not tenant_urls:
        tenant_urls = _select_tenants(store, console)
        if not tenant_urls:
            return 0

    exit_code = 0
    for tenant_url in tenant_urls:
        try:
            removed = store.delete(tenant_url)
        except CredentialStoreError as e:
            console.print(f"[bold red]Error:[/bold red] {e}")
            exit_code = 1
            continue

        canonical = normalize_tenant_url(tenant_url)
        if removed:
            console.print(f"[green]✓[/green] Removed credentials for {canonical}")
        else:
            console.print(f"[yellow]No stored credentials for {canonical}[/yellow]")
            exit_code = 1
    return exit_code


def _select_tenants(store: ICredentialStore, console: Console) -> list[str]:
    stored = store.list_all()
    if not stored:
        console.print("[yellow]No stored credentials found.[/yellow]")
        return []

    console.print("\n[bold cyan]Select credentials to remove[/bold cyan]")
    console.print(_credentials_table(stored, numbered=True))
    answer = Prompt.ask(
        "Numbers to remove (comma-separated, empty to cancel)",
        default="",
        show_default=False,
        console=console,
    )

    selected = []
    for token in answer.replace(" ", "").split(","):
        if not token:
            continue
        if not token.isdigit() or not 1 <= int(token) <= len(stored):
            console.print(f"[bold red]Error:[/bold red] Invalid selection: {token}")
            return []
        selected.append(stored[int(token) - 1].tenant_url)

    if not selected:
        console.print("[yellow]Cancelled[/yellow]")
        return []
    if not Confirm.ask(
        f"Remove credentials for {', '.join(selected)}?", default=False, console=console
    ):
        console.print("[yellow]Cancelled[/yellow]")
        return []
    return selected


def _has_credential(store: ICredentialStore, tenant_url: str) -> bool:
    try:
        store.lookup(tenant_url)
    except NotFoundError:
        return False
    except CorruptionError:
        return True
    return True
