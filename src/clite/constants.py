from __future__ import annotations

CLITE_VERSION = "0.1.0"
CLITE_TAB_STOP = 8
CLITE_QUERY_LEN = 256
CLITE_QUIT_TIMES = 3
CLITE_MESSAGE_TIMEOUT = 5

# Status line + message line below the text area.
STATUS_LINES = 2

# Syntax highlight types.
HL_NORMAL = 0
HL_COMMENT = 1
HL_STRING = 2
HL_NUMBER = 3
HL_MATCH = 4

HL_HIGHLIGHT_NUMBERS = 1 << 0
HL_HIGHLIGHT_STRINGS = 1 << 1

# Key actions.
CTRL_F = 6
CTRL_H = 8
CTRL_J = 10
CTRL_L = 12
ENTER = 13
CTRL_Q = 17
CTRL_S = 19
ESC = 27
BACKSPACE = 127

ARROW_LEFT = 1000
ARROW_RIGHT = 1001
ARROW_UP = 1002
ARROW_DOWN = 1003
DEL_KEY = 1004
HOME_KEY = 1005
END_KEY = 1006
PAGE_UP = 1007
PAGE_DOWN = 1008

CSI_SIMPLE_MAP = {
    ord("A"): ARROW_UP,
    ord("B"): ARROW_DOWN,
    ord("C"): ARROW_RIGHT,
    ord("D"): ARROW_LEFT,
    ord("H"): HOME_KEY,
    ord("F"): END_KEY,
}
CSI_TILDE_MAP = {
    ord("1"): HOME_KEY,
    ord("3"): DEL_KEY,
    ord("4"): END_KEY,
    ord("5"): PAGE_UP,
    ord("6"): PAGE_DOWN,
    ord("7"): HOME_KEY,
    ord("8"): END_KEY,
}
SS3_SIMPLE_MAP = {
    ord("H"): HOME_KEY,
    ord("F"): END_KEY,
}

ANSI_HIDE_CURSOR = "\x1b[?25l"
ANSI_SHOW_CURSOR = "\x1b[?25h"
ANSI_CURSOR_HOME = "\x1b[H"
ANSI_CLEAR_SCREEN = "\x1b[2J"
ANSI_CLEAR_LINE = "\x1b[K"
ANSI_INVERT_ON = "\x1b[7m"
ANSI_INVERT_OFF = "\x1b[m"
ANSI_DEFAULT_FG = "\x1b[39m"

C_HL_EXTENSIONS = (".c", ".h", ".cpp", ".hpp", ".cc")
