"""CLI commands implemented with click.

One command per vault operation. Results are printed as JSON so another
front end can drive the CLI; errors are printed as ``Error: ...`` with exit
status 1.
"""
from __future__ import annotations
import json, logging, click

from peka.config.settings import log_level
from peka.lib.errors import VaultError
from peka.lib.policy import check_master_password
from peka.lib.store import VaultStore


def _emit(data):
	click.echo(json.dumps(data, indent=2))

def _fail(e: Exception):
	click.echo(f'Error: {e}')
	raise SystemExit(1)


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Log debug output to stderr.')
@click.pass_context
def cli(ctx, verbose):
	"""peka: encrypted credential vaults"""
	logging.basicConfig(level=logging.DEBUG if verbose else log_level())
	if ctx.obj is None:
		ctx.obj = VaultStore()

@cli.command()
@click.option('--name', prompt='Vault name')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@click.pass_obj
def create(store: VaultStore, name, password):
	"""Create a new empty vault."""
	check = check_master_password(password)
	if not check.ok:
		click.echo(f'Warning: {check.feedback()}', err=True)
	try:
		_emit({'path': store.create_vault(name, password)})
	except VaultError as e:
		_fail(e)

@cli.command('open')
@click.argument('path')
@click.option('--password', prompt=True, hide_input=True)
@click.pass_obj
def open_cmd(store: VaultStore, path, password):
	"""Decrypt a vault and print its contents."""
	try:
		_emit(store.open_vault(path, password).to_dict())
	except VaultError as e:
		_fail(e)

@cli.command('list')
@click.pass_obj
def list_cmd(store: VaultStore):
	"""List vault files in the vault directory."""
	_emit([s.to_dict() for s in store.list_vaults()])

@cli.command()
@click.argument('path')
@click.confirmation_option(prompt='Delete this vault permanently?')
@click.pass_obj
def delete(store: VaultStore, path):
	"""Delete a vault file from the vault directory."""
	try:
		store.delete_vault(path)
		click.echo('Vault deleted.')
	except VaultError as e:
		_fail(e)

@cli.command('export')
@click.argument('source')
@click.argument('destination')
@click.pass_obj
def export_cmd(store: VaultStore, source, destination):
	"""Copy a vault file out of the vault directory."""
	try:
		store.export_vault_file(source, destination)
		click.echo(f'Vault exported to {destination}')
	except VaultError as e:
		_fail(e)

@cli.command('import')
@click.argument('source')
@click.option('--name', prompt='Vault name')
@click.option('--password', prompt=True, hide_input=True)
@click.pass_obj
def import_cmd(store: VaultStore, source, name, password):
	"""Import an existing vault file under a new name."""
	try:
		_emit({'path': store.import_vault(source, name, password)})
	except VaultError as e:
		_fail(e)

@cli.command('pw-check')
@click.argument('password')
def pw_check(password):
	"""Show master password strength feedback."""
	click.echo(check_master_password(password).feedback())


# --- Folder subcommands ---

@cli.group()
def folder():
	"""Manage folders inside a vault."""

@folder.command('create')
@click.argument('path')
@click.option('--password', prompt=True, hide_input=True)
@click.option('--name', prompt='Folder name')
@click.option('--secure', is_flag=True, help='Protect the folder with a 4-digit PIN.')
@click.option('--pin', default=None, help='PIN for secure folders.')
@click.pass_obj
def folder_create(store: VaultStore, path, password, name, secure, pin):
	"""Add a folder, optionally PIN-protected."""
	if secure and pin is None:
		pin = click.prompt('PIN', hide_input=True)
	try:
		_emit(store.create_folder(path, password, name, secure, pin).to_dict())
	except VaultError as e:
		_fail(e)

@folder.command('delete')
@click.argument('path')
@click.argument('folder_id')
@click.option('--password', prompt=True, hide_input=True)
@click.pass_obj
def folder_delete(store: VaultStore, path, folder_id, password):
	"""Remove a folder and its credentials."""
	try:
		_emit(store.delete_folder(path, password, folder_id).to_dict())
	except VaultError as e:
		_fail(e)

@folder.command('verify-pin')
@click.argument('path')
@click.argument('folder_id')
@click.option('--password', prompt=True, hide_input=True)
@click.option('--pin', prompt=True, hide_input=True)
@click.pass_obj
def folder_verify_pin(store: VaultStore, path, folder_id, password, pin):
	"""Print true when the PIN unlocks the folder."""
	try:
		_emit(store.verify_folder_pin(path, password, folder_id, pin))
	except VaultError as e:
		_fail(e)


# --- Credential subcommands ---

@cli.group()
def credential():
	"""Manage credentials inside a folder."""

@credential.command('add')
@click.argument('path')
@click.argument('folder_id')
@click.option('--password', prompt=True, hide_input=True, help='Master password.')
@click.option('--title', prompt=True)
@click.option('--username', prompt=True, default='')
@click.option('--secret', prompt='Credential password', hide_input=True)
@click.option('--notes', default=None)
@click.pass_obj
def credential_add(store: VaultStore, path, folder_id, password, title, username, secret, notes):
	"""Add a credential to a folder."""
	try:
		_emit(store.add_credential(path, password, folder_id, title, username, secret, notes).to_dict())
	except VaultError as e:
		_fail(e)

@credential.command('delete')
@click.argument('path')
@click.argument('folder_id')
@click.argument('credential_id')
@click.option('--password', prompt=True, hide_input=True)
@click.pass_obj
def credential_delete(store: VaultStore, path, folder_id, credential_id, password):
	"""Remove a credential from a folder."""
	try:
		_emit(store.delete_credential(path, password, folder_id, credential_id).to_dict())
	except VaultError as e:
		_fail(e)
