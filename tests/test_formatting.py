# -*- coding: utf-8 -*-
import pytest

from irbis_client import MarcRecord
from irbis_client.errors import ProtocolError, ServerError

from conftest import frame, request_arguments, request_lines


def test_format_record_with_stored_format(client, transport):
    transport.queue(frame(0, 'Byron G. Childe Harold\x1f\x1e1812  '))

    text = client.format_record('@brief', 1)

    assert text == 'Byron G. Childe Harold\n1812'
    assert request_lines(transport.last_packet)[0] == 'G'
    assert request_arguments(transport.last_packet) == ['IBIS', '@brief', '1', '1']


def test_format_record_inline_program(client, transport):
    transport.queue(frame(0, 'Заглавие'))

    assert client.format_record("v200^a /* заглавие\r\n", 7) == 'Заглавие'
    assert request_arguments(transport.last_packet)[1] == '!v200^a '


def test_format_record_validates_arguments(client, transport):
    with pytest.raises(ValueError):
        client.format_record('@brief', 0)
    with pytest.raises(ValueError):
        client.format_record('', 1)
    assert len(transport.packets) == 1


def test_format_record_server_error(client, transport):
    transport.queue(frame(-140))

    with pytest.raises(ServerError) as info:
        client.format_record('@brief', 100000)

    assert info.value.description == 'MFN outside the database range'


def test_format_records_in_request_order(client, transport):
    transport.queue(frame(0, '3#Third', '1#First\x1f\x1eline two', '2#Second'))

    result = client.format_records('@brief', [3, 1, 2])

    assert result == ['Third', 'First\nline two', 'Second']
    assert request_arguments(transport.last_packet) == ['IBIS', '@brief', '3', '3', '1', '2']


def test_format_records_single_mfn_reads_plain_text(client, transport):
    transport.queue(frame(0, 'Byron G. Childe Harold'), frame(0, 'Byron G. Childe Harold'))

    single = client.format_record('@brief', 4)
    batch = client.format_records('@brief', [4])

    assert batch == [single] == ['Byron G. Childe Harold']
    assert request_arguments(transport.packets[-1]) == request_arguments(transport.packets[-2])


def test_format_records_empty_list(client, transport):
    assert client.format_records('@brief', []) == []
    assert len(transport.packets) == 1


@pytest.mark.parametrize('lines', [
    ('1#First',),
    ('1#First', '2#Second', '3#Extra'),
    ('1#First', '5#Wrong'),
    ('1#First', 'no separator'),
])
def test_format_records_mismatch_is_protocol_error(client, transport, lines):
    transport.queue(frame(0, *lines))

    with pytest.raises(ProtocolError):
        client.format_records('@brief', [1, 2])


def test_format_virtual_record(client, transport):
    transport.queue(frame(0, 'Title Example'))
    record = MarcRecord()
    record.append(200).append('a', 'Title Example')

    assert client.format_virtual_record('v200^a', record) == 'Title Example'
    arguments = request_arguments(transport.last_packet)
    assert arguments[:3] == ['IBIS', '!v200^a', '-2']
    assert arguments[3] == '0#0\x1f\x1e0#0\x1f\x1e200#^aTitle Example\x1f\x1e'


def test_format_virtual_record_keeps_leading_indent(client, transport):
    transport.queue(frame(0, '   Title Example\x1f\x1e  second line  '))
    record = MarcRecord()
    record.append(200).append('a', 'Title Example')

    assert client.format_virtual_record('v200^a', record) == '   Title Example\n  second line'
