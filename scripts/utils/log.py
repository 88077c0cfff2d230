from colorama import Fore, Style, just_fix_windows_console

just_fix_windows_console()

RULE = "-" * 73


def _paint(color, msg):
    return f"{color}{msg}{Style.RESET_ALL}"


def h1(msg):
    print(f"\n\n{_paint(Fore.CYAN, RULE)}")
    print(f"{_paint(Fore.CYAN, msg)}\n")


def h2(msg):
    print(f"\n{_paint(Fore.LIGHTBLUE_EX, '▸ ' + msg)}\n")


def h3(msg):
    print(f"\t{_paint(Fore.GREEN, msg)}")


def warn(msg):
    print(f"\t{_paint(Fore.YELLOW, msg)}")


def error(msg):
    print(_paint(Fore.RED, msg))


def info(msg):
    print(msg)


def address(label, value, explorer_url=None):
    # one line per contract, explorer link appended when known
    line = f"{label}: {_paint(Fore.MAGENTA, value)}"
    if explorer_url:
        line += f"  {explorer_url}{value}"
    print(line)
