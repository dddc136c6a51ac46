"""Read hyperparameters from the user, falling back to defaults."""


def parse_or_default(text, default, cast=float, check=None):
    """
    Convert text with cast; return default when text is None, blank, not
    convertible, or rejected by check(value).

    Returns:
        (value, used_default)
    """
    if text is None:
        return default, True
    text = str(text).strip()
    if not text:
        return default, True
    # Only the first whitespace-separated token counts
    token = text.split()[0]
    try:
        value = cast(token)
    except (TypeError, ValueError):
        return default, True
    if check is not None and not check(value):
        return default, True
    return value, False


def read_value(prompt, default, cast=float, check=None, reader=input):
    """
    Prompt for a value. An empty answer selects the default silently; an
    invalid answer prints a notice and selects the default.
    """
    try:
        answer = reader(prompt)
    except EOFError:
        return default
    value, used_default = parse_or_default(answer, default, cast, check)
    if used_default and answer.strip():
        print(f"Invalid input. Using {default}.")
    return value
