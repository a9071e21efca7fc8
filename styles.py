"""Centralized style definitions for the Timeline Lens viewer."""

from PyQt5.QtGui import QFont, QFontDatabase


# Unified Color Palette
class Colors:
    # Dark base colors
    BG_PRIMARY = "#0F172A"      # Main background
    BG_PANELS = "#1E293B"       # Panel background
    BG_TABLES = "#0B1220"       # Event list background

    # Text Colors
    TEXT_PRIMARY = "#E2E8F0"    # Primary text
    TEXT_SECONDARY = "#94A3B8"  # Secondary text
    TEXT_MUTED = "#64748B"      # Muted text

    # Accent Colors
    ACCENT_BLUE = "#3B82F6"     # Selection
    ACCENT_CYAN = "#00FFFF"     # Titles and mode badge

    # Status Colors
    SUCCESS = "#10B981"         # Status message
    WARNING = "#F59E0B"         # Truncated list notice
    ERROR = "#EF4444"           # Time expression errors

    # Border Colors
    BORDER_SUBTLE = "#334155"
    BORDER_ACCENT = "#475569"


class TimelineStyles:
    """Style sheets for the timeline viewer window."""

    @staticmethod
    def monospace_font(point_size=10):
        """Return the system fixed-width font at the given size."""
        font = QFontDatabase.systemFont(QFontDatabase.FixedFont)
        font.setPointSize(point_size)
        return font

    @staticmethod
    def title_font():
        font = QFont()
        font.setBold(True)
        return font

    WINDOW = f"""
        QWidget {{
            background-color: {Colors.BG_PRIMARY};
            color: {Colors.TEXT_PRIMARY};
        }}
    """

    LIST_WIDGET = f"""
        QListWidget {{
            background-color: {Colors.BG_TABLES};
            color: {Colors.TEXT_PRIMARY};
            border: 1px solid {Colors.BORDER_SUBTLE};
            border-radius: 6px;
            padding: 4px;
        }}
        QListWidget::item {{
            padding: 2px 4px;
        }}
        QListWidget::item:selected {{
            background-color: {Colors.ACCENT_BLUE};
            color: #FFFFFF;
        }}
    """

    DETAIL_PANEL = f"""
        QTextEdit {{
            background-color: {Colors.BG_PANELS};
            color: {Colors.TEXT_PRIMARY};
            border: 1px solid {Colors.BORDER_SUBTLE};
            border-radius: 6px;
            padding: 6px;
        }}
    """

    PANEL_TITLE = f"""
        QLabel {{
            color: {Colors.ACCENT_CYAN};
            font-weight: 600;
            padding: 2px 0px;
        }}
    """

    MODE_BADGE = f"""
        QLabel {{
            background-color: {Colors.ACCENT_CYAN};
            color: #000000;
            font-weight: 700;
            padding: 2px 8px;
            border-radius: 3px;
        }}
    """

    COMMAND_BAR = f"""
        QLabel {{
            background-color: {Colors.BORDER_ACCENT};
            color: {Colors.TEXT_PRIMARY};
            padding: 2px 8px;
        }}
    """

    STATUS_BAR = f"""
        QLabel {{
            color: {Colors.SUCCESS};
            padding: 2px 4px;
        }}
    """

    ERROR_LABEL = f"""
        QLabel {{
            color: {Colors.ERROR};
            font-weight: 600;
            padding: 2px 4px;
        }}
    """
