# -*- coding: utf-8 -*-
import json
import logging

import pytest

from irbis_client import IrbisClient, IrbisClientFactory, Session

from conftest import frame


def test_create_client_with_aliases():
    client = IrbisClientFactory.create_client(server='10.0.0.5', login='librarian', pwd='secret',
                                              db='RDR', arm='R', port='7777')

    assert isinstance(client, IrbisClient)
    assert client.session == Session(host='10.0.0.5', port=7777, username='librarian',
                                     password='secret', database='RDR', workstation='R')
    assert not client.connected


def test_create_client_defaults():
    session = IrbisClientFactory.create_client().session

    assert (session.host, session.port, session.database, session.workstation) == ('127.0.0.1', 6666, 'IBIS', 'C')
    assert session.timeout == 30.0


def test_unknown_setting_is_rejected():
    with pytest.raises(ValueError, match='colour'):
        IrbisClientFactory.create_client(colour='red')


def test_bad_port_is_rejected():
    with pytest.raises(ValueError):
        IrbisClientFactory.create_client(port='http')


def test_parse_connection_string():
    settings = IrbisClientFactory.parse_connection_string(
        'Host=192.168.1.10; Port=6666; User=librarian; Password=secret; Database=IBIS; timeout=5;'
    )

    assert settings == {
        'host': '192.168.1.10', 'port': 6666, 'username': 'librarian',
        'password': 'secret', 'database': 'IBIS', 'timeout': 5.0,
    }


@pytest.mark.parametrize('text', ['host=1.2.3.4;bogus=1;', 'host=1.2.3.4;justtext;'])
def test_bad_connection_string(text):
    with pytest.raises(ValueError):
        IrbisClientFactory.parse_connection_string(text)


def test_connection_string_round_trip():
    session = Session(host='10.1.1.1', port=6667, username='u', password='p', database='RDR', workstation='R')
    text = session.to_connection_string(show_password=True)

    again = IrbisClientFactory.from_connection_string(text).session

    assert again == session
    assert 'password=***' in session.to_connection_string()


def test_from_connection_string_with_transport(transport, register_frame):
    transport.queue(register_frame)
    client = IrbisClientFactory.from_connection_string('user=librarian;pwd=secret;', transport)

    client.connect()

    assert client.connected
    assert transport.connect_calls == 1


def test_from_config_file(tmp_path):
    path = tmp_path / 'irbis.json'
    path.write_text(json.dumps({'host': '10.0.0.7', 'username': 'librarian', 'password': 'secret'}),
                    encoding='utf-8')

    client = IrbisClientFactory.from_config_file(str(path))

    assert client.session.host == '10.0.0.7'
    assert client.session.username == 'librarian'


def test_config_file_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        IrbisClientFactory.from_config_file(str(tmp_path / 'missing.json'))

    broken = tmp_path / 'broken.json'
    broken.write_text('{"host": ', encoding='utf-8')
    with pytest.raises(ValueError):
        IrbisClientFactory.from_config_file(str(broken))

    listing = tmp_path / 'list.json'
    listing.write_text('[1, 2]', encoding='utf-8')
    with pytest.raises(ValueError):
        IrbisClientFactory.from_config_file(str(listing))


def test_log_masks_password_and_host(caplog):
    caplog.set_level(logging.INFO, logger='irbis_client')
    IrbisClientFactory.create_client(host='192.168.1.10', username='librarian', password='topsecret')

    assert 'topsecret' not in caplog.text
    assert '192.168.1.10' not in caplog.text
    assert '192.xxx.xxx.10' in caplog.text


def test_session_to_dict_masks_password():
    session = Session(username='u', password='p')

    assert session.to_dict()['password'] == '***'
    assert session.to_dict(show_password=True)['password'] == 'p'
