"""Palette and sizing constants for the Dash app."""

BACKGROUND = "#F7F7F5"
TEXT = "#333333"

FONT_STACK = '"Helvetica Neue", Arial, sans-serif'

SIDEBAR_WIDTH = "320px"
LEGEND_WIDTH = "240px"

STOP_MARKER_SIZE = 16
STOP_BORDER_WIDTH = 2
TRAIN_LINE_WIDTH = 2
TRAIN_LINE_OPACITY = 0.75
