"""TUI mode for browsing and editing one entity table."""

import logging
from typing import Any, ClassVar

import pyperclip
from rich.markup import escape
from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding, BindingType
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Button, DataTable, Footer, Header, Input, Label, Static, TextArea

from hla.api.resources import ResourceSpec, get_resource
from hla.cli.utils.forms import form_fields, resolve_form_values
from hla.cli.utils.list_shared import RowTransformer
from hla.core.constants import EntityType, TUIConstants
from hla.core.highlighting import highlight_text
from hla.exceptions import APIError, ValidationError
from hla.logging_config import silence_console_logging
from hla.models.league import LeagueEntity
from hla.models.paging import FilterValue
from hla.models.payloads import WritePayload, build_payload
from hla.services.admin import LeagueAdmin
from hla.services.list_view import ListViewModel
from hla.services.notifications import Notification, NotificationLevel
from hla.services.pager import Pager

# Modal dialog constants
FORM_DIALOG_WIDTH = 70
CELL_CONTENT_WIDTH_PERCENT = 80  # Cell content dialog width as percentage
CELL_CONTENT_MAX_WIDTH = 100  # Maximum width for cell content dialog
CELL_CONTENT_HEIGHT_PERCENT = 60  # Cell content dialog height as percentage

# CSS constants
CSS_PADDING = 1  # Standard padding value for CSS
CSS_MARGIN_ZERO = 0  # Zero margin value

ROW_NUMBER_START = 1  # Starting number for row labels

SEVERITIES = {
    NotificationLevel.SUCCESS: "information",
    NotificationLevel.INFO: "information",
    NotificationLevel.ERROR: "error",
}

logger = logging.getLogger(__name__)


def page_strip(pager: Pager) -> str:
    """Render the pager window as ``1 2 [3] ... 10``."""
    parts = []
    for page in pager.visible_pages():
        if page is None:
            parts.append("...")
        elif page == pager.current_page:
            parts.append(f"\\[{page}]")
        else:
            parts.append(str(page))
    return " ".join(parts)


class TUINotifier:
    """Shows mutation notifications as Textual toasts."""

    def __init__(self, app: App[Any]) -> None:
        self.app = app

    def notify(self, notification: Notification) -> None:
        self.app.notify(
            notification.message,
            severity=SEVERITIES[notification.level],  # type: ignore[arg-type]
            timeout=TUIConstants.NOTIFY_TIMEOUT,
        )


class CellContentScreen(ModalScreen[None]):
    """Modal screen to display cell content that can be copied."""

    CSS = f"""
    CellContentScreen {{
        align: center middle;
    }}

    CellContentScreen > Vertical {{
        width: {CELL_CONTENT_WIDTH_PERCENT}%;
        max-width: {CELL_CONTENT_MAX_WIDTH};
        height: {CELL_CONTENT_HEIGHT_PERCENT}%;
        background: $surface;
        border: solid $primary;
        padding: {CSS_PADDING};
    }}

    #cell-content {{
        height: 1fr;
    }}
    """

    BINDINGS: ClassVar[list[BindingType]] = [
        Binding("escape", "dismiss", "Close", show=False),
        Binding("ctrl+a", "select_all", "Select All", show=True),
    ]

    def __init__(self, content: str, title: str = "Cell Content"):
        super().__init__()
        self.content = content
        self.title = title

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static(f"[bold]{self.title}[/bold]")
            text_area = TextArea(self.content, read_only=True)
            text_area.id = "cell-content"
            yield text_area
            yield Static("[dim]Press ESC to return to table[/dim]")

    def on_mount(self) -> None:
        text_area = self.query_one("#cell-content", TextArea)
        text_area.focus()
        text_area.select_all()

    def action_select_all(self) -> None:
        self.query_one("#cell-content", TextArea).select_all()


class ConfirmScreen(ModalScreen[bool]):
    """Yes/no confirmation dialog."""

    CSS = f"""
    ConfirmScreen {{
        align: center middle;
    }}

    ConfirmScreen > Vertical {{
        width: {FORM_DIALOG_WIDTH};
        height: auto;
        background: $surface;
        border: solid $warning;
        padding: {CSS_PADDING};
    }}

    ConfirmScreen Horizontal {{
        height: auto;
        align: right middle;
    }}
    """

    BINDINGS: ClassVar[list[BindingType]] = [
        Binding("escape", "cancel", "Cancel", show=False),
        Binding("y", "confirm", "Yes", show=False),
    ]

    def __init__(self, message: str) -> None:
        super().__init__()
        self.message = message

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static(self.message, markup=False)
            with Horizontal():
                yield Button("Delete", variant="error", id="confirm")
                yield Button("Cancel", id="cancel")

    @on(Button.Pressed, "#confirm")
    def action_confirm(self) -> None:
        self.dismiss(True)

    @on(Button.Pressed, "#cancel")
    def action_cancel(self) -> None:
        self.dismiss(False)


class FormScreen(ModalScreen[WritePayload | None]):
    """Create/edit dialog with per-field validation messages.

    The payload is validated before the dialog closes; nothing invalid
    reaches the backend.
    """

    CSS = f"""
    FormScreen {{
        align: center middle;
    }}

    FormScreen > VerticalScroll {{
        width: {FORM_DIALOG_WIDTH};
        height: auto;
        max-height: 90%;
        background: $surface;
        border: solid $primary;
        padding: {CSS_PADDING};
    }}

    .field-error {{
        color: $error;
        height: auto;
    }}

    FormScreen Horizontal {{
        height: auto;
        align: right middle;
        margin: {CSS_PADDING} {CSS_MARGIN_ZERO} {CSS_MARGIN_ZERO} {CSS_MARGIN_ZERO};
    }}
    """

    BINDINGS: ClassVar[list[BindingType]] = [
        Binding("escape", "cancel", "Cancel", show=False),
    ]

    def __init__(
        self,
        admin: LeagueAdmin,
        resource: ResourceSpec,
        model: type[WritePayload],
        title: str,
        initial: dict[str, Any] | None = None,
    ) -> None:
        super().__init__()
        self.admin = admin
        self.resource = resource
        self.model = model
        self.title = title
        self.initial = initial or {}
        self.fields = form_fields(resource.entity)
        self.errors: dict[str, str] = {}

    def compose(self) -> ComposeResult:
        with VerticalScroll():
            yield Static(f"[bold]{self.title}[/bold]")
            for form_field in self.fields:
                value = self.initial.get(form_field.key)
                yield Label(form_field.label)
                yield Input(
                    value="" if value is None else str(value),
                    placeholder=form_field.placeholder,
                    id=f"field-{form_field.key}",
                )
                yield Static("", id=f"error-{form_field.key}", classes="field-error", markup=False)
            yield Static("", id="error-form", classes="field-error", markup=False)
            with Horizontal():
                yield Button("Save", variant="primary", id="save")
                yield Button("Cancel", id="cancel")

    def on_mount(self) -> None:
        if self.fields:
            self.query_one(f"#field-{self.fields[0].key}", Input).focus()

    def show_error(self, field: str, message: str) -> None:
        self.errors[field] = message
        targets = self.query(f"#error-{field}")
        target = targets.first(Static) if targets else self.query_one("#error-form", Static)
        target.update(message)

    def clear_errors(self) -> None:
        self.errors.clear()
        for widget in self.query(".field-error"):
            if isinstance(widget, Static):
                widget.update("")

    @on(Button.Pressed, "#save")
    @on(Input.Submitted)
    async def save(self) -> None:
        self.clear_errors()
        raw = {form_field.key: self.query_one(f"#field-{form_field.key}", Input).value for form_field in self.fields}
        try:
            data = await resolve_form_values(self.admin, self.resource.entity, self.model, raw)
            payload = build_payload(self.model, data)
        except ValidationError as e:
            self.show_error(e.field, e.message)
            return
        except APIError as e:
            self.show_error("form", f"Could not resolve names: {e.message}")
            return
        self.dismiss(payload)

    @on(Button.Pressed, "#cancel")
    def action_cancel(self) -> None:
        self.dismiss(None)


class LeagueListTUI(App[None]):
    """Paginated, searchable table of one entity with edit actions."""

    AUTO_FOCUS = "#rows"

    CSS = f"""
    #search {{
        dock: top;
    }}

    DataTable {{
        height: 1fr;
    }}

    .status-bar {{
        dock: bottom;
        height: {TUIConstants.STATUS_BAR_HEIGHT};
        background: $surface;
        color: $text;
        padding: {CSS_MARGIN_ZERO} {CSS_PADDING};
    }}
    """

    BINDINGS: ClassVar[list[BindingType]] = [
        Binding("q", "quit", "Quit", show=True),
        Binding("/", "focus_search", "Search", show=True),
        Binding("n", "next_page", "Next", show=True),
        Binding("p", "previous_page", "Prev", show=True),
        Binding("f", "first_page", "First", show=False),
        Binding("l", "last_page", "Last", show=False),
        Binding("r", "refresh", "Reload", show=True),
        Binding("a", "add_row", "Add", show=True),
        Binding("u", "edit_row", "Edit", show=True),
        Binding("d", "delete_row", "Delete", show=True),
        Binding("e", "toggle_status", "Enable/Disable", show=True),
        Binding("c", "copy_cell", "Copy Cell", show=True),
        Binding("enter", "show_cell", "Show Cell", show=False),
    ]

    def __init__(
        self,
        admin: LeagueAdmin,
        entity: EntityType,
        search_term: str = "",
        filters: dict[str, FilterValue] | None = None,
        page_size: int | None = None,
    ):
        super().__init__()
        self.admin = admin
        self.entity = entity
        self.resource = get_resource(entity)
        self.initial_search = search_term
        self.filters = filters or {}
        self.page_size = page_size
        self.transformer = RowTransformer(entity)
        self.title = f"{entity.value.capitalize()}"
        self.view: ListViewModel | None = None
        self.status_message = ""

    def compose(self) -> ComposeResult:
        yield Header()
        yield Input(value=self.initial_search, placeholder=f"Search {self.entity.value}...", id="search")
        yield DataTable(id="rows")
        yield Static("Loading...", classes="status-bar", id="status")
        yield Footer()

    def on_mount(self) -> None:
        self.admin.mutations.notifier = TUINotifier(self)
        self.view = self.admin.list_view(
            self.entity, page_size=self.page_size, filters=self.filters, on_change=self.render_rows
        )
        table = self.query_one("#rows", DataTable)
        table.cursor_type = "cell"
        table.show_row_labels = True
        for column in self.transformer.columns:
            table.add_column(column.label, width=column.width, key=column.key)
        if self.resource.search_param is None:
            self.query_one("#search", Input).disabled = True
        table.focus()
        self.run_worker(self.view.set_search_term(self.initial_search), group="fetch")

    def on_unmount(self) -> None:
        if self.view is not None:
            self.view.close()

    # Rendering

    def render_rows(self) -> None:
        if self.view is None:
            return
        table = self.query_one("#rows", DataTable)
        cursor = table.cursor_coordinate
        table.clear()
        term = self.view.search_term
        start = self.view.pager.page_index * self.view.page_size + ROW_NUMBER_START
        for offset, row in enumerate(self.view.rows):
            cells = [
                highlight_text(cell, term) if column.searchable else cell
                for column, cell in zip(self.transformer.columns, self.transformer.cells(row), strict=True)
            ]
            table.add_row(*cells, key=str(row.id), label=str(start + offset))
        if self.view.rows:
            table.move_cursor(row=min(cursor.row, len(self.view.rows) - 1), column=cursor.column, animate=False)
        self.update_status()

    def update_status(self, extra: str = "") -> None:
        if self.view is None:
            return
        pager = self.view.pager
        parts = []
        if self.view.error is not None:
            parts.append(f"[red]{escape(self.view.error.message)}[/red] | press r to retry")
        elif self.view.loading and self.view.result is None:
            parts.append("Loading...")
        else:
            parts.append(pager.summary())
            if pager.visible:
                parts.append(f"Page {pager.current_page}/{pager.total_pages}: {page_strip(pager)}")
        if self.view.loading and self.view.result is not None:
            parts.append("[dim]refreshing[/dim]")
        if extra:
            parts.append(extra)
        self.status_message = " | ".join(parts)
        self.query_one("#status", Static).update(self.status_message)

    def selected_row(self) -> LeagueEntity | None:
        if self.view is None:
            return None
        table = self.query_one("#rows", DataTable)
        rows = self.view.rows
        row_index = table.cursor_coordinate.row
        return rows[row_index] if 0 <= row_index < len(rows) else None

    # Search and paging

    @on(Input.Changed, "#search")
    def on_search_changed(self, event: Input.Changed) -> None:
        if self.view is not None:
            self.view.type_search(event.value)

    @on(Input.Submitted, "#search")
    def on_search_submitted(self) -> None:
        if self.view is not None:
            self.view.debouncer.flush()
        self.query_one("#rows", DataTable).focus()

    def action_focus_search(self) -> None:
        self.query_one("#search", Input).focus()

    def action_next_page(self) -> None:
        if self.view is not None:
            self.run_worker(self.view.next_page(), group="fetch")

    def action_previous_page(self) -> None:
        if self.view is not None:
            self.run_worker(self.view.previous_page(), group="fetch")

    def action_first_page(self) -> None:
        if self.view is not None:
            self.run_worker(self.view.jump_to(1), group="fetch")

    def action_last_page(self) -> None:
        if self.view is not None:
            self.run_worker(self.view.jump_to(self.view.pager.total_pages), group="fetch")

    def action_refresh(self) -> None:
        if self.view is not None:
            self.run_worker(self.view.retry(), group="fetch")

    # Mutations

    def action_toggle_status(self) -> None:
        field = self.resource.toggle_field
        row = self.selected_row()
        if field is None:
            self.notify(f"{self.resource.label} rows have no status to toggle", severity="warning")
            return
        if row is None:
            return
        self.run_worker(self._toggle(row, field, not getattr(row, field)), group="mutation")

    async def _toggle(self, row: LeagueEntity, field: str, value: bool) -> None:
        try:
            await self.admin.mutations.toggle_status(
                self.entity, row.id, value, self.admin.auth_token, display_name=row.display_name
            )
        except APIError as e:
            # Rolled back and notified by the dispatcher
            logger.debug(f"Toggle of {field} on {row.id} failed: {e.message}")

    def action_delete_row(self) -> None:
        row = self.selected_row()
        if not self.resource.deletable:
            self.notify(f"{self.resource.label} rows cannot be deleted", severity="warning")
            return
        if row is None:
            return

        def handle_confirm(confirmed: bool | None) -> None:
            if confirmed:
                self.run_worker(self._delete(row), group="mutation")

        self.push_screen(ConfirmScreen(f'Delete {self.resource.label.lower()} "{row.display_name}"?'), handle_confirm)

    async def _delete(self, row: LeagueEntity) -> None:
        try:
            await self.admin.mutations.delete(
                self.entity, row.id, self.admin.auth_token, display_name=row.display_name
            )
        except APIError as e:
            logger.debug(f"Delete of {row.id} failed: {e.message}")

    def action_add_row(self) -> None:
        model = self.resource.create_model
        if model is None:
            self.notify(f"{self.resource.label} rows cannot be created here", severity="warning")
            return

        def handle_payload(payload: WritePayload | None) -> None:
            if payload is not None:
                self.run_worker(self._save(None, payload), group="mutation")

        self.push_screen(FormScreen(self.admin, self.resource, model, f"New {self.resource.label.lower()}"), handle_payload)

    def action_edit_row(self) -> None:
        model = self.resource.update_model
        row = self.selected_row()
        if model is None:
            self.notify(f"{self.resource.label} rows cannot be edited here", severity="warning")
            return
        if row is None:
            return

        def handle_payload(payload: WritePayload | None) -> None:
            if payload is not None:
                self.run_worker(self._save(row, payload), group="mutation")

        initial = row.model_dump(mode="json", by_alias=True)
        title = f'Edit {self.resource.label.lower()} "{row.display_name}"'
        self.push_screen(FormScreen(self.admin, self.resource, model, title, initial), handle_payload)

    async def _save(self, row: LeagueEntity | None, payload: WritePayload) -> None:
        try:
            if row is None:
                await self.admin.mutations.create(self.entity, payload, self.admin.auth_token)
            else:
                await self.admin.mutations.update(
                    self.entity, row.id, payload, self.admin.auth_token, display_name=None
                )
        except APIError as e:
            logger.debug(f"Saving {self.entity} failed: {e.message}")

    # Cells

    def _current_cell(self) -> tuple[str, str] | None:
        row = self.selected_row()
        if row is None:
            return None
        column = self.query_one("#rows", DataTable).cursor_coordinate.column
        label = self.transformer.columns[column].label if column < len(self.transformer.columns) else ""
        return label, self.transformer.cell(row, column)

    def action_show_cell(self) -> None:
        cell = self._current_cell()
        if cell is not None:
            label, content = cell
            self.push_screen(CellContentScreen(content, label))

    def action_copy_cell(self) -> None:
        cell = self._current_cell()
        if cell is None:
            return
        try:
            pyperclip.copy(cell[1])
            self.update_status("[green]Copied to clipboard![/green]")
        except pyperclip.PyperclipException:
            self.update_status("[red]Copy failed - clipboard not available[/red]")


def launch_list_tui(
    admin: LeagueAdmin,
    entity: EntityType,
    search_term: str = "",
    filters: dict[str, FilterValue] | None = None,
    page_size: int | None = None,
) -> None:
    """Launch the TUI app for one entity table."""
    silence_console_logging()
    app = LeagueListTUI(admin, entity, search_term, filters, page_size)
    with admin:
        app.run()
