"""Program entry point (CLI dispatcher)."""
from __future__ import annotations
from peka.cli.commands import cli

def main():  # pragma: no cover - thin wrapper
	cli(prog_name='peka')

if __name__ == '__main__':  # pragma: no cover
	main()
