"""
Timeline Window - Main window for browsing a Defender device timeline.

This module provides the PyQt5 viewer: an event list, a detail panel for the
selected event and a command bar showing the current mode, the staged input
and key hints. All filtering and mode logic lives in TimelineSession; the
window only translates Qt key presses into logical key events and redraws.
"""

import logging

from PyQt5.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QListWidget, QTextEdit, QSplitter
)
from PyQt5.QtCore import Qt

from styles import TimelineStyles
from timeline.mode_controller import KeyEvent, KeyKind
from timeline.timeline_session import TimelineSession

# Qt keys with a fixed logical meaning in every mode
_QT_KEY_MAP = {
    Qt.Key_Up: KeyKind.UP,
    Qt.Key_Down: KeyKind.DOWN,
    Qt.Key_Return: KeyKind.CONFIRM,
    Qt.Key_Enter: KeyKind.CONFIRM,
    Qt.Key_Escape: KeyKind.CANCEL,
    Qt.Key_Backspace: KeyKind.BACKSPACE,
}

DETAIL_SCROLL_LINES = 5


def key_event_from_qt(key, text, modifiers):
    """
    Translate a Qt key press into a logical key event.

    Args:
        key: Qt.Key value
        text: Text produced by the key press
        modifiers: Active keyboard modifiers

    Returns:
        KeyEvent, or None when the key has no logical meaning
    """
    if modifiers & Qt.ControlModifier:
        if key == Qt.Key_Q:
            return KeyEvent(KeyKind.QUIT)
        if key == Qt.Key_L:
            return KeyEvent(KeyKind.CLEAR_ALL)
        return None

    kind = _QT_KEY_MAP.get(key)
    if kind is not None:
        return KeyEvent(kind)

    if text and text.isprintable():
        return KeyEvent.of_char(text)
    return None


class TimelineWindow(QWidget):
    """
    Keyboard-driven timeline viewer.

    The window owns no state beyond what it is currently drawing; every key
    press goes through the session and is followed by a redraw.
    """

    def __init__(self, session: TimelineSession, title: str = "Timeline Lens", parent=None):
        """
        Initialize the viewer window.

        Args:
            session: Session over the loaded timeline
            title: Window title (usually the file name)
            parent: Parent widget
        """
        super().__init__(parent)
        self.logger = logging.getLogger(self.__class__.__name__)
        self.session = session

        # Identity of what the list currently shows, to avoid rebuilding 5000 rows per key
        self._list_source = None

        self._init_ui(title)
        self.refresh()

    def _init_ui(self, title):
        """Initialize the user interface components."""
        self.setWindowTitle(title)
        self.setMinimumSize(1024, 700)
        self.setStyleSheet(TimelineStyles.WINDOW)
        self.setFocusPolicy(Qt.StrongFocus)

        main_layout = QVBoxLayout(self)
        main_layout.setContentsMargins(8, 8, 8, 8)
        main_layout.setSpacing(6)

        splitter = QSplitter(Qt.Horizontal)
        splitter.addWidget(self._create_list_panel())
        splitter.addWidget(self._create_detail_panel())
        splitter.setStretchFactor(0, 3)
        splitter.setStretchFactor(1, 2)
        main_layout.addWidget(splitter, stretch=1)

        self.error_label = QLabel()
        self.error_label.setStyleSheet(TimelineStyles.ERROR_LABEL)
        self.error_label.hide()
        main_layout.addWidget(self.error_label)

        self.status_label = QLabel()
        self.status_label.setStyleSheet(TimelineStyles.STATUS_BAR)
        main_layout.addWidget(self.status_label)

        main_layout.addLayout(self._create_command_bar())
        self.setLayout(main_layout)

    def _create_list_panel(self):
        panel = QWidget()
        layout = QVBoxLayout(panel)
        layout.setContentsMargins(0, 0, 0, 0)

        self.list_title = QLabel()
        self.list_title.setStyleSheet(TimelineStyles.PANEL_TITLE)
        self.list_title.setFont(TimelineStyles.title_font())
        layout.addWidget(self.list_title)

        self.list_widget = QListWidget()
        self.list_widget.setStyleSheet(TimelineStyles.LIST_WIDGET)
        self.list_widget.setFont(TimelineStyles.monospace_font())
        self.list_widget.setUniformItemSizes(True)
        # Keys go to the window, never to the list
        self.list_widget.setFocusPolicy(Qt.NoFocus)
        self.list_widget.itemClicked.connect(self._on_item_clicked)
        layout.addWidget(self.list_widget)
        return panel

    def _create_detail_panel(self):
        panel = QWidget()
        layout = QVBoxLayout(panel)
        layout.setContentsMargins(0, 0, 0, 0)

        self.detail_title = QLabel("Details")
        self.detail_title.setStyleSheet(TimelineStyles.PANEL_TITLE)
        self.detail_title.setFont(TimelineStyles.title_font())
        layout.addWidget(self.detail_title)

        self.detail_panel = QTextEdit()
        self.detail_panel.setReadOnly(True)
        self.detail_panel.setFocusPolicy(Qt.NoFocus)
        self.detail_panel.setStyleSheet(TimelineStyles.DETAIL_PANEL)
        self.detail_panel.setFont(TimelineStyles.monospace_font())
        layout.addWidget(self.detail_panel)
        return panel

    def _create_command_bar(self):
        bar = QHBoxLayout()
        bar.setSpacing(0)

        self.mode_badge = QLabel()
        self.mode_badge.setStyleSheet(TimelineStyles.MODE_BADGE)
        bar.addWidget(self.mode_badge)

        self.command_label = QLabel()
        self.command_label.setStyleSheet(TimelineStyles.COMMAND_BAR)
        bar.addWidget(self.command_label, stretch=1)
        return bar

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def keyPressEvent(self, event):
        """Route key presses through the session."""
        key = event.key()

        if key in (Qt.Key_PageUp, Qt.Key_PageDown):
            self._scroll_detail(-DETAIL_SCROLL_LINES if key == Qt.Key_PageUp else DETAIL_SCROLL_LINES)
            return

        logical = key_event_from_qt(key, event.text(), event.modifiers())
        if logical is None:
            super().keyPressEvent(event)
            return

        self.session.handle_key(logical)
        self.refresh()

        if self.session.should_quit:
            self.close()

    def _on_item_clicked(self, item):
        if self.session.is_list_mode():
            return
        self.session.select(self.list_widget.row(item))
        self.refresh()

    def _scroll_detail(self, lines):
        bar = self.detail_panel.verticalScrollBar()
        bar.setValue(bar.value() + lines * bar.singleStep())

    def closeEvent(self, event):
        self.logger.info("Timeline viewer closing")
        super().closeEvent(event)

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def refresh(self):
        """Redraw every part of the window from the session."""
        session = self.session

        self.list_title.setText(session.list_title())
        if session.is_list_mode():
            self._show_choices()
        else:
            self._show_events()

        self._show_detail()

        error = session.error
        self.error_label.setText(error or "")
        self.error_label.setVisible(bool(error))

        self.status_label.setText(session.status_line())
        self.mode_badge.setText(f" {session.mode_label()} ")

        prompt = session.prompt_text()
        hint = session.hint_text()
        self.command_label.setText(f"{prompt}   {hint}" if prompt else hint)

    def _show_choices(self):
        labels = self.session.choice_labels()
        source = ('choices', labels)
        if source != self._list_source:
            self.list_widget.clear()
            self.list_widget.addItems(list(labels))
            self._list_source = source

        highlighted = self.session.highlighted_index()
        if highlighted is not None:
            self.list_widget.setCurrentRow(highlighted)

    def _show_events(self):
        visible = self.session.visible
        source = ('events', visible)
        if source != self._list_source:
            self.list_widget.clear()
            self.list_widget.addItems([record.list_line() for record in visible])
            self._list_source = source

        selected = self.session.selected_index
        if selected is not None:
            self.list_widget.setCurrentRow(selected)
            self.list_widget.scrollToItem(self.list_widget.item(selected))

    def _show_detail(self):
        if self.session.is_list_mode():
            return

        record = self.session.selected_record()
        if record is None:
            self.detail_title.setText("No results")
            self.detail_panel.setPlainText("\n".join(self.session.empty_result_lines()))
            return

        self.detail_title.setText("Details")
        lines = [f"{label}: {value}" for label, value in record.detail_lines()]
        self.detail_panel.setPlainText("\n".join(lines))
