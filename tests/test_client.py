# -*- coding: utf-8 -*-
import pytest

from irbis_client import IrbisClient
from irbis_client.errors import DataError, ProtocolError, ServerError

from conftest import frame, request_arguments, request_lines

RECORD = ('1#0', '0#1', '200#^aTitle Example^bSubtitle', '920#PAZK')


def test_facade_exposes_session_info(client):
    assert client.connected
    assert client.server_version == '64.2014.1'
    assert client.interval == 300
    assert client.database == 'IBIS'
    assert client.ini.get_value('private', 'dbnname2') == 'dbnam2.mnu'


def test_read_record(client, transport):
    transport.queue(frame(0, *RECORD))

    record = client.read_record(1)

    assert record.database == 'IBIS'
    assert record.mfn == 1
    assert len(record.fields) == 2
    assert record.fields[0].tag == 200
    assert record.fm(200, 'a') == 'Title Example'
    assert record.fm(200, 'b') == 'Subtitle'
    assert request_lines(transport.last_packet)[0] == 'C'
    assert request_arguments(transport.last_packet) == ['IBIS', '1', '0']


def test_read_record_utf8_text(client, transport):
    transport.queue(frame(0, '5#0', '0#1', '200#^aВойна и мир'))

    assert client.read_record(5).fm(200, 'a') == 'Война и мир'


@pytest.mark.parametrize('code', [-201, -600, -602, -603])
def test_read_record_allowed_codes_still_return_record(client, transport, code):
    transport.queue(frame(code, '1#1', '0#1', '920#PAZK'))

    record = client.read_record(1)

    assert record.fm(920) == 'PAZK'


def test_read_record_logically_deleted(client, transport):
    transport.queue(frame(-600, '1#1', '0#1', '920#PAZK'))

    assert client.read_record(1).deleted


def test_read_record_errors(client, transport):
    transport.queue(frame(-140), frame(0, 'not a record'))

    with pytest.raises(ServerError) as info:
        client.read_record(100000)
    assert info.value.code == -140

    with pytest.raises(DataError):
        client.read_record(1)

    with pytest.raises(ValueError):
        client.read_record(0)


def test_read_old_version_unlocks_record(client, transport):
    transport.queue(frame(0, *RECORD), frame(0))

    record = client.read_record(1, version=1)

    assert record.mfn == 1
    assert request_arguments(transport.packets[1]) == ['IBIS', '1', '1']
    assert request_lines(transport.last_packet)[0] == 'Q'
    assert request_arguments(transport.last_packet) == ['IBIS', '1']


def test_read_records_batch(client, transport):
    transport.queue(frame(
        0,
        '1#0\x1f1#0\x1f0#1\x1f200#^aFirst\x1f',
        '2#0\x1f2#0\x1f0#4\x1f200#^aSecond\x1f920#PAZK',
    ))

    records = client.read_records([1, 2])

    assert [r.mfn for r in records] == [1, 2]
    assert [r.fm(200, 'a') for r in records] == ['First', 'Second']
    assert records[1].version == 4
    assert records[1].fm(920) == 'PAZK'
    assert all(r.database == 'IBIS' for r in records)
    assert request_arguments(transport.last_packet) == ['IBIS', "&uf('+0')", '2', '1', '2']


def test_read_records_single_uses_read_record(client, transport):
    transport.queue(frame(0, *RECORD))

    records = client.read_records([1])

    assert len(records) == 1
    assert request_lines(transport.last_packet)[0] == 'C'


def test_read_records_batch_failure_fails_whole_operation(client, transport):
    transport.queue(frame(0, '1#0\x1f1#0\x1f0#1\x1f200#^aFirst'))

    with pytest.raises(ProtocolError):
        client.read_records([1, 2])


def test_read_records_empty(client, transport):
    assert client.read_records([]) == []
    assert len(transport.packets) == 1


def test_unlock_records(client, transport):
    transport.queue(frame(0))
    client.unlock_records([3, 4], 'RDR')

    assert request_arguments(transport.last_packet) == ['RDR', '3', '4']


def test_get_max_mfn_is_return_code(client, transport):
    transport.queue(frame(1234))

    assert client.get_max_mfn() == 1234
    assert request_lines(transport.last_packet)[0] == 'O'
    assert request_arguments(transport.last_packet) == ['IBIS']


def test_get_max_mfn_error(client, transport):
    transport.queue(frame(-300))

    with pytest.raises(ServerError):
        client.get_max_mfn('RDR')


def test_no_op(client, transport):
    transport.queue(frame(0))
    client.no_op()

    assert request_lines(transport.last_packet)[0] == 'N'
    assert request_arguments(transport.last_packet) == []


def test_client_context_manager(session, transport, register_frame):
    transport.queue(register_frame, frame(0, '1', '5'), frame(0))

    with IrbisClient(session, transport) as client:
        assert client.search('"K=ALG$"').mfns == [5]

    assert not client.connected
    assert [request_lines(p, 'cp1251')[0] for p in transport.packets] == ['A', 'K', 'B']


def test_get_server_version_with_organization(client, transport):
    transport.queue(frame(0, 'ООО Библиотека', '64.2014.1', '3', '100', encoding='cp1251'))

    info = client.get_server_version()

    assert info.organization == 'ООО Библиотека'
    assert (info.server_version, info.connected_clients, info.max_clients) == ('64.2014.1', 3, 100)
    assert request_lines(transport.last_packet)[0] == '1'
    assert request_arguments(transport.last_packet) == []


def test_get_server_version_without_organization(client, transport):
    transport.queue(frame(0, '64.2014.1', '1', '10', ''), frame(0, '64.2014.1', '1'))

    info = client.get_server_version()

    assert info.organization == ''
    assert info.max_clients == 10
    with pytest.raises(ProtocolError):
        client.get_server_version()


def test_get_database_info(client, transport):
    transport.queue(frame(0, '3\x1e5\x1e', '', '7', '', '1234', '0'))

    info = client.get_database_info()

    assert info.name == 'IBIS'
    assert info.logically_deleted == [3, 5]
    assert info.physically_deleted == []
    assert info.non_actualized == [7]
    assert info.locked_records == []
    assert info.max_mfn == 1234
    assert not info.database_locked
    assert request_lines(transport.last_packet)[0] == '0'
    assert request_arguments(transport.last_packet) == ['IBIS']


def test_get_database_info_errors(client, transport):
    transport.queue(frame(0, '', '', '', '1', '0'), frame(-300))

    with pytest.raises(ProtocolError):
        client.get_database_info('RDR')
    with pytest.raises(ServerError):
        client.get_database_info('NONE')
