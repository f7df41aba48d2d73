"""
Overlay builders - convert annotations and selection state to positioned Flet controls.
"""

from __future__ import annotations

from typing import Callable, List, Optional

import flet as ft

from ..types import Annotation, AnnotationKind, Point, SelectionRect

ANNOTATION_OPACITY = 0.35
UNDERLINE_WIDTH = 2
SELECTION_COLOR = "#3390ff"


def annotation_control(
    annotation: Annotation,
    on_delete: Optional[Callable] = None,
) -> ft.Container:
    """Create the overlay box for one annotation.

    Highlights are filled boxes, underlines draw only the bottom edge.
    """
    pos = annotation.position
    color = ft.Colors.with_opacity(ANNOTATION_OPACITY, annotation.color)

    controls: List[ft.Control] = []
    if on_delete:
        controls.append(
            ft.Container(
                content=ft.Icon(ft.Icons.DELETE_OUTLINE, size=12, color="#18181b"),
                bgcolor=ft.Colors.with_opacity(0.8, "#ffffff"),
                border_radius=4,
                padding=2,
                right=0,
                top=0,
                tooltip="Delete annotation",
                on_click=on_delete,
            )
        )

    if annotation.kind == AnnotationKind.HIGHLIGHT:
        bgcolor, border = color, None
    else:
        bgcolor = ft.Colors.TRANSPARENT
        border = ft.border.only(bottom=ft.BorderSide(UNDERLINE_WIDTH, color))

    return ft.Container(
        content=ft.Stack(controls=controls),
        left=pos.x,
        top=pos.y,
        width=pos.width,
        height=pos.height,
        bgcolor=bgcolor,
        border=border,
        tooltip=annotation.text_content or "Annotation",
        data=annotation.id,
    )


def annotation_controls(
    annotations,
    on_delete: Optional[Callable[[str], Callable]] = None,
) -> List[ft.Container]:
    """Create overlay boxes for a page.

    Args:
        annotations: Visible annotations
        on_delete: Factory returning the click handler for an annotation id
    """
    return [
        annotation_control(a, on_delete(a.id) if on_delete else None)
        for a in annotations
    ]


def selection_control(
    rect: Optional[SelectionRect],
    color: str = SELECTION_COLOR,
) -> Optional[ft.Container]:
    """Create the live selection rectangle, or None when nothing is selected."""
    if rect is None:
        return None
    return ft.Container(
        left=rect.x,
        top=rect.y,
        width=rect.width,
        height=rect.height,
        bgcolor=ft.Colors.with_opacity(0.1, color),
        border=ft.border.all(2, ft.Colors.with_opacity(0.7, color)),
    )


def creation_menu(
    anchor: Optional[Point],
    on_highlight: Callable,
    on_underline: Callable,
    on_cancel: Callable,
    highlight_color: str = "#fde68a",
    underline_color: str = "#60a5fa",
) -> ft.Container:
    """Create the annotation menu shown after a drag.

    Hidden when `anchor` is None.
    """

    def action_btn(icon: str, tooltip: str, on_click, color: str = "#a1a1a1"):
        def on_hover(e):
            e.control.bgcolor = "rgba(255,255,255,0.1)" if e.data == "true" else None
            if e.control.page:
                e.control.update()

        return ft.Container(
            content=ft.Icon(icon, size=18, color=color),
            width=36,
            height=36,
            border_radius=8,
            alignment=ft.alignment.center,
            on_click=on_click,
            tooltip=tooltip,
            on_hover=on_hover,
        )

    left, top = anchor if anchor is not None else (0, 0)

    return ft.Container(
        content=ft.Row(
            controls=[
                action_btn(ft.Icons.BORDER_COLOR, "Highlight", on_highlight, highlight_color),
                action_btn(ft.Icons.FORMAT_UNDERLINED, "Underline", on_underline, underline_color),
                ft.Container(width=1, height=24, bgcolor="rgba(255,255,255,0.15)"),
                action_btn(ft.Icons.CLOSE, "Cancel", on_cancel),
            ],
            spacing=2,
            tight=True,
        ),
        bgcolor="#18181b",
        border=ft.border.all(1, "rgba(255,255,255,0.1)"),
        border_radius=10,
        padding=ft.padding.symmetric(horizontal=4, vertical=2),
        shadow=ft.BoxShadow(
            spread_radius=0,
            blur_radius=16,
            color=ft.Colors.with_opacity(0.4, "#000000"),
            offset=ft.Offset(0, 4),
        ),
        visible=anchor is not None,
        left=left,
        top=top,
    )
