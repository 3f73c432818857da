import json
from pathlib import Path
from click.testing import CliRunner
from peka.cli.commands import cli
from peka.config import settings
from scripts.backup import main as backup_main

PW = 'Correct-Horse-9-Battery'

def run(store, args, input=None):
    return CliRunner().invoke(cli, args, input=input, obj=store)

def run_json(store, args):
    r = run(store, args)
    assert r.exit_code == 0, r.output
    return json.loads(r.output)

def make_vault(store):
    return run_json(store, ['create', '--name', 'Personal', '--password', PW])['path']


def test_cli_help():
    r = CliRunner().invoke(cli, ['--help'])
    assert r.exit_code == 0
    for name in ('create', 'open', 'list', 'folder', 'credential', 'import', 'export'):
        assert name in r.output
    assert 'Delete a vault file' in r.output
    for group, name in [('folder', 'Add a folder'), ('credential', 'Remove a credential')]:
        assert name in CliRunner().invoke(cli, [group, '--help']).output

def test_cli_create_with_prompts(store):
    r = run(store, ['create'], input=f'Personal\n{PW}\n{PW}\n')
    assert r.exit_code == 0
    assert 'Personal.peka' in r.output
    assert [s.vault_name for s in store.list_vaults()] == ['Personal']

def test_cli_create_warns_on_weak_password(store):
    r = run(store, ['create', '--name', 'Weak', '--password', 'pw'])
    assert r.exit_code == 0
    assert 'Warning' in r.output

def test_cli_create_rejects_empty_name(store):
    r = run(store, ['create', '--name', '  ', '--password', PW])
    assert r.exit_code == 1
    assert 'Error: Vault name cannot be empty' in r.output

def test_cli_open_and_list(store):
    path = make_vault(store)
    assert run_json(store, ['open', path, '--password', PW]) == {'vaultName': 'Personal', 'folders': []}
    assert run_json(store, ['list']) == [{'path': path, 'vaultName': 'Personal'}]
    bad = run(store, ['open', path, '--password', 'nope'])
    assert bad.exit_code == 1
    assert 'incorrect password or corrupted data' in bad.output

def test_cli_folder_and_credential_lifecycle(store):
    path = make_vault(store)
    data = run_json(store, ['folder', 'create', path, '--password', PW, '--name', 'Bank', '--secure', '--pin', '1234'])
    folder = data['folders'][0]
    assert folder['secure'] and 'pinHash' not in folder
    fid = folder['id']
    assert run_json(store, ['folder', 'verify-pin', path, fid, '--password', PW, '--pin', '1234']) is True
    assert run_json(store, ['folder', 'verify-pin', path, fid, '--password', PW, '--pin', '0000']) is False
    data = run_json(store, ['credential', 'add', path, fid, '--password', PW, '--title', 'Chase',
                            '--username', 'alice', '--secret', 's3cr3t', '--notes', 'main account'])
    cred = data['folders'][0]['credentials'][0]
    assert (cred['username'], cred['password'], cred['notes']) == ('alice', 's3cr3t', 'main account')
    data = run_json(store, ['credential', 'delete', path, fid, cred['id'], '--password', PW])
    assert data['folders'][0]['credentials'] == []
    assert run_json(store, ['folder', 'delete', path, fid, '--password', PW])['folders'] == []

def test_cli_secure_folder_prompts_for_pin(store):
    path = make_vault(store)
    r = run(store, ['folder', 'create', path, '--password', PW, '--name', 'Locked', '--secure'], input='12ab\n')
    assert r.exit_code == 1
    assert 'PIN must be exactly 4 digits' in r.output

def test_cli_not_found(store):
    path = make_vault(store)
    r = run(store, ['folder', 'delete', path, 'missing', '--password', PW])
    assert r.exit_code == 1
    assert 'Folder not found' in r.output

def test_cli_delete_and_export(store, tmp_path):
    path = make_vault(store)
    dest = tmp_path / 'out' / 'copy.peka'
    r = run(store, ['export', path, str(dest)])
    assert r.exit_code == 0 and dest.exists()
    r = run(store, ['delete', '../../etc/passwd.peka', '--yes'])
    assert r.exit_code == 1
    assert 'Vault path is invalid' in r.output
    r = run(store, ['delete', path], input='n\n')
    assert r.exit_code != 0 and Path(path).exists()
    r = run(store, ['delete', path, '--yes'])
    assert r.exit_code == 0 and not Path(path).exists()

def test_cli_import(store, tmp_path):
    path = make_vault(store)
    dest = tmp_path / 'copy.peka'
    run(store, ['export', path, str(dest)])
    new_path = run_json(store, ['import', str(dest), '--name', 'Restored', '--password', PW])['path']
    assert run_json(store, ['open', new_path, '--password', PW])['vaultName'] == 'Restored'

def test_cli_pw_check():
    r = CliRunner().invoke(cli, ['pw-check', 'weak'])
    assert r.exit_code == 0
    assert 'Very Weak' in r.output
    r = CliRunner().invoke(cli, ['pw-check', PW])
    assert 'Very Strong' in r.output

def test_cli_uses_vault_dir_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv('PEKA_VAULT_DIR', str(tmp_path / 'env-vaults'))
    r = CliRunner().invoke(cli, ['list'])
    assert r.exit_code == 0
    assert json.loads(r.output) == []

def test_backup_script(store, tmp_path):
    make_vault(store)
    run(store, ['create', '--name', 'Work', '--password', PW])
    dest = tmp_path / 'backups'
    r = CliRunner().invoke(backup_main, ['--dest', str(dest)], obj=store)
    assert r.exit_code == 0, r.output
    names = sorted(p.name for p in dest.iterdir())
    assert len(names) == 2
    assert names[0].startswith('Personal_') and names[1].startswith('Work_')

def test_backup_script_without_vaults(store, tmp_path):
    r = CliRunner().invoke(backup_main, ['--dest', str(tmp_path / 'b')], obj=store)
    assert r.exit_code == 1
    assert 'nothing to backup' in r.output

def test_log_level_read_at_call_time(monkeypatch, store):
    monkeypatch.setenv('PEKA_LOG_LEVEL', 'debug')
    assert settings.log_level() == 'DEBUG'
    monkeypatch.delenv('PEKA_LOG_LEVEL')
    assert settings.log_level() == 'WARNING'
    assert run(store, ['--verbose', 'list']).exit_code == 0
