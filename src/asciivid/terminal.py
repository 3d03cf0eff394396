RESET = "\033[0m"

# Cursor home, then erase the whole display
CLEAR_SCREEN = "\033[H\033[2J"


def foreground(r: int, g: int, b: int) -> str:
    """24-bit truecolor foreground escape."""
    return f"\033[38;2;{r};{g};{b}m"


def colour_glyph(glyph: str, r: int, g: int, b: int) -> str:
    return f"{foreground(r, g, b)}{glyph}{RESET}"
