# -*- coding: utf-8 -*-
"""
Пример работы с сервером ИРБИС64: сведения о сервере, файлы,
поиск, чтение и форматирование записей.

Запуск:
    python examples/example_client.py "host=localhost;user=librarian;pwd=secret;db=IBIS;"
"""

import sys
import os

# Добавляем путь к библиотеке
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from irbis_client import (
    IrbisClientFactory,
    IrbisError,
    PerformanceLogger,
    SearchParameters,
    get_logger,
    setup_logging,
)

DEFAULT_CONNECTION = "host=localhost;user=librarian;pwd=secret;db=IBIS;"


def show_server_info(client):
    version = client.get_server_version()
    print(f"Версия сервера: {version.server_version}, клиентов {version.connected_clients} из {version.max_clients}")
    print(f"Интервал: {client.interval}")
    print(f"DBNNAMECAT={client.ini.get_value('Main', 'DBNNAMECAT', '???')}")

    for database in client.list_databases():
        flag = " (только чтение)" if database.read_only else ""
        print(f"  {database.name} - {database.description}{flag}")

    info = client.get_database_info()
    print(f"Максимальный MFN: {info.max_mfn}, удалено записей: {len(info.logically_deleted)}")


def show_files(client):
    print(client.read_text_file("3.IBIS.WS.OPT"))
    print(client.read_menu_file("3.IBIS.FORMATW.MNU"))
    print(client.list_files("3.IBIS.brief.*", "3.IBIS.a*.pft"))


def show_records(client, logger):
    found = client.search('"A=Пушкин$"')
    print(f"Найдено: {found.found}")

    with PerformanceLogger("Чтение найденных записей", logger):
        records = client.read_records(found.mfns[:10])

    descriptions = client.format_records("@brief", [r.mfn for r in records])
    for record, description in zip(records, descriptions):
        print(f"Заглавие: {record.fm(200, 'a')}")
        print(f"Биб. описание: {description}")

    parameters = SearchParameters(expression='"A=Пушкин$"', number_of_records=5,
                                  format="v200^a")
    for line in client.search_ex(parameters):
        print(f"{line.mfn}: {line.description}")

    record = client.search_single_record('"A=Пушкин$"')
    if record is not None:
        print(f"Первая запись: MFN {record.mfn}")

    print(client.list_terms("K=АЛГ")[:10])


def main():
    setup_logging(log_level="INFO", file_output=False)
    logger = get_logger(__name__)

    connection_string = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_CONNECTION
    client = IrbisClientFactory.from_connection_string(connection_string)

    try:
        # отключение от сервера гарантируется при любом выходе из блока
        with client:
            show_server_info(client)
            show_files(client)
            show_records(client, logger)
    except IrbisError as e:
        logger.error(f"Ошибка работы с сервером: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
