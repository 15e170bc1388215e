# -*- coding: utf-8 -*-
import pytest

from irbis_client import SearchParameters
from irbis_client.errors import DataError, ServerError

from conftest import frame, request_arguments, request_lines


def test_search_returns_mfns_in_server_order(client, transport):
    transport.queue(frame(0, '3', '12', '7', '12'))

    result = client.search('"A=Byron, George$"')

    assert result.mfns == [12, 7, 12]
    assert result.found == 3
    assert len(result) == 3
    assert list(result) == [12, 7, 12]


def test_search_request(client, transport):
    transport.queue(frame(0, '0'))
    client.search('"T=Война и мир$"')

    assert request_lines(transport.last_packet)[0] == 'K'
    assert request_arguments(transport.last_packet) == ['IBIS', '"T=Война и мир$"', '0', '1']


def test_search_in_other_database(client, transport):
    transport.queue(frame(0, '0'))
    client.search('K=ALG$', database='RDR')

    assert request_arguments(transport.last_packet)[0] == 'RDR'


def test_empty_result_is_not_an_error(client, transport):
    transport.queue(frame(0, '0'))

    result = client.search('"K=nothing$"')

    assert result.mfns == []
    assert not result


def test_empty_expression_makes_no_request(client, transport):
    assert client.search('').mfns == []
    assert client.search_count('') == 0
    assert client.search_all('') == []
    assert len(transport.packets) == 1


def test_search_descriptions_are_reduced_to_mfn(client, transport):
    transport.queue(frame(0, '2', '5#Byron G.', '9#Shelley P.B.'))

    assert client.search('"A=$"').mfns == [5, 9]


def test_search_server_error(client, transport):
    transport.queue(frame(-1111))

    with pytest.raises(ServerError) as info:
        client.search('"K=ALG$"')

    assert info.value.code == -1111
    assert info.value.command == 'K'


def test_bad_mfn_line_is_data_error(client, transport):
    transport.queue(frame(0, '1', 'abc'))

    with pytest.raises(DataError):
        client.search('"K=ALG$"')


def test_search_count(client, transport):
    transport.queue(frame(0, '12345'))

    assert client.search_count('"K=ALG$"') == 12345
    assert request_arguments(transport.last_packet)[2:] == ['0', '0']


def test_search_all_pages_by_first_record(client, transport):
    transport.queue(
        frame(0, '5', '1', '2'),
        frame(0, '5', '3', '4'),
        frame(0, '5', '5'),
    )

    assert client.search_all('"K=ALG$"') == [1, 2, 3, 4, 5]
    firsts = [request_arguments(packet)[3] for packet in transport.packets[1:]]
    assert firsts == ['1', '3', '5']


def test_search_all_stops_on_empty_portion(client, transport):
    transport.queue(frame(0, '4', '1', '2'), frame(0, '4'))

    assert client.search_all('"K=ALG$"') == [1, 2]


def test_search_all_nothing_found(client, transport):
    transport.queue(frame(0, '0'))

    assert client.search_all('"K=ALG$"') == []
    assert len(transport.packets) == 2


def test_search_ex(client, transport):
    transport.queue(frame(0, '2', '5#Байрон Дж. Паломничество', '9#'))
    parameters = SearchParameters(
        expression='"A=Byron$"',
        number_of_records=10,
        format='@brief',
        min_mfn=1,
        max_mfn=100,
    )

    found = client.search_ex(parameters)

    assert [(f.mfn, f.description) for f in found] == [(5, 'Байрон Дж. Паломничество'), (9, '')]
    assert request_arguments(transport.last_packet, 'cp1251') == [
        'IBIS', '"A=Byron$"', '10', '1', '@brief', '1', '100', '',
    ]


def test_search_ex_inline_format_and_sequential(client, transport):
    transport.queue(frame(0, '0'))
    parameters = SearchParameters(expression='"K=ALG$"', format='v200^a', sequential='p(v920)',
                                  database='RDR')
    client.search_ex(parameters)

    arguments = request_arguments(transport.last_packet)
    assert arguments[0] == 'RDR'
    assert arguments[4] == '!v200^a'
    assert arguments[7] == 'p(v920)'


def test_search_ex_without_expression(client, transport):
    assert client.search_ex(SearchParameters()) == []
    assert len(transport.packets) == 1


def test_search_read(client, transport):
    transport.queue(frame(
        0,
        '2',
        '1#0\x1f1#0\x1f0#1\x1f200#^aFirst\x1f',
        '2#0\x1f2#0\x1f0#3\x1f200#^aSecond',
    ))

    records = client.search_read('"A=Byron$"')

    assert [r.mfn for r in records] == [1, 2]
    assert [r.fm(200, 'a') for r in records] == ['First', 'Second']
    assert records[1].version == 3
    assert all(r.database == 'IBIS' for r in records)
    assert request_lines(transport.last_packet)[0] == 'K'
    assert request_arguments(transport.last_packet) == [
        'IBIS', '"A=Byron$"', '0', '1', "!&uf('+0')", '0', '0', '',
    ]


def test_search_read_skips_lines_without_record(client, transport):
    transport.queue(frame(0, '2', '4', '5#0\x1f5#0\x1f0#1\x1f920#PAZK'))

    records = client.search_read('"K=ALG$"', database='RDR')

    assert [(r.mfn, r.database) for r in records] == [(5, 'RDR')]


def test_search_read_validates_arguments(client, transport):
    assert client.search_read('') == []
    with pytest.raises(ValueError):
        client.search_read('"K=ALG$"', limit=-1)
    assert len(transport.packets) == 1


def test_search_single_record(client, transport):
    transport.queue(frame(0, '7', '3#0\x1f3#0\x1f0#2\x1f200#^aOnly'), frame(0, '0'))

    record = client.search_single_record('"K=ALG$"')

    assert record.mfn == 3
    assert request_arguments(transport.last_packet)[2] == '1'
    assert client.search_single_record('"K=NOTHING$"') is None
