"""
CLI entry point, when used as a module: `python -m kubrest`.

Useful for debugging in the IDEs (use the start-mode "Module", module "kubrest").
"""
from kubrest import cli

if __name__ == '__main__':
    cli.main()
