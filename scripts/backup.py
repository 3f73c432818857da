"""Back up every vault in the vault directory.

Usage (from repo root):
  python -m scripts.backup --dest backups/
"""
from __future__ import annotations
from datetime import datetime
from pathlib import Path
import click
from peka.lib.errors import VaultError
from peka.lib.store import VaultStore

@click.command()
@click.option('--dest', type=click.Path(file_okay=False, path_type=Path), default=Path('backups'), help='Destination directory for backups.')
@click.pass_obj
def main(store: VaultStore | None, dest: Path):
	store = store or VaultStore()
	vaults = store.list_vaults()
	if not vaults:
		click.echo(f"No vaults in {store.vault_dir}; nothing to backup.")
		raise SystemExit(1)
	dest.mkdir(parents=True, exist_ok=True)
	stamp = datetime.now().strftime('%Y%m%d_%H%M%S')
	for summary in vaults:
		source = Path(summary.path)
		target = dest / f"{source.stem}_{stamp}{source.suffix}"
		try:
			store.export_vault_file(source, target)
		except VaultError as e:
			click.echo(f"Error: {source.name}: {e}")
			raise SystemExit(1)
		click.echo(f"Backup written: {target}")

if __name__ == '__main__':  # pragma: no cover
	main()
