"""记录源单元测试."""

import io

import pytest

from elasticpipe.source import (
    CsvRecordSource,
    InputFormat,
    NdjsonRecordSource,
    RecordParseError,
    SourceReadError,
    open_record_source,
)


def _collect_errors():
    errors: list[RecordParseError] = []
    return errors, errors.append


# ============================================================
# NDJSON
# ============================================================


class TestNdjsonRecordSource:
    """NdjsonRecordSource 测试."""

    def test_reads_objects_in_order(self) -> None:
        """测试按顺序读取每行对象."""
        stream = io.BytesIO(b'{"n": 1}\n{"n": 2}\n{"n": 3}\n')
        records = list(NdjsonRecordSource(stream))
        assert records == [{"n": 1}, {"n": 2}, {"n": 3}]

    def test_skips_blank_lines(self) -> None:
        """测试空行被静默忽略."""
        stream = io.BytesIO(b'{"n": 1}\n\n   \n{"n": 2}')
        errors, on_error = _collect_errors()
        records = list(NdjsonRecordSource(stream, on_error=on_error))
        assert records == [{"n": 1}, {"n": 2}]
        assert errors == []

    def test_invalid_json_is_reported_and_skipped(self) -> None:
        """测试非法 JSON 行被跳过并上报行号."""
        stream = io.BytesIO(b'{"n": 1}\n{broken\n{"n": 3}\n')
        errors, on_error = _collect_errors()
        source = NdjsonRecordSource(stream, on_error=on_error)

        records = list(source)

        assert records == [{"n": 1}, {"n": 3}]
        assert len(errors) == 1
        assert errors[0].line_number == 2
        assert source.parse_errors == 1

    def test_non_object_is_reported(self) -> None:
        """测试非对象的 JSON 值（数组、数字）作为解析错误."""
        stream = io.BytesIO(b'[1, 2]\n42\n{"ok": true}\n')
        errors, on_error = _collect_errors()
        records = list(NdjsonRecordSource(stream, on_error=on_error))
        assert records == [{"ok": True}]
        assert [e.line_number for e in errors] == [1, 2]

    def test_invalid_utf8_is_reported(self) -> None:
        """测试非法 UTF-8 行作为解析错误而不是中断读取."""
        stream = io.BytesIO(b'{"n": "\xff\xfe"}\n{"n": 2}\n')
        errors, on_error = _collect_errors()
        records = list(NdjsonRecordSource(stream, on_error=on_error))
        assert records == [{"n": 2}]
        assert len(errors) == 1

    def test_deeply_nested_line_is_reported(self) -> None:
        """测试嵌套过深的行作为解析错误而不是中断读取."""
        stream = io.BytesIO(b'{"a": 1}\n' + b"[" * 100000 + b'\n{"b": 2}\n')
        errors, on_error = _collect_errors()
        records = list(NdjsonRecordSource(stream, on_error=on_error))
        assert records == [{"a": 1}, {"b": 2}]
        assert [e.line_number for e in errors] == [2]

    def test_lazy_reading(self) -> None:
        """测试记录源是惰性的，只读取到需要的位置."""
        stream = io.BytesIO(b'{"n": 1}\n{"n": 2}\n{"n": 3}\n')
        iterator = iter(NdjsonRecordSource(stream))
        assert next(iterator) == {"n": 1}
        assert stream.tell() == len(b'{"n": 1}\n')

    def test_read_failure_is_fatal(self) -> None:
        """测试底层流读取失败抛出 SourceReadError."""

        class BrokenStream(io.RawIOBase):
            def readable(self):
                return True

            def readinto(self, buffer):
                raise OSError("device not ready")

        with pytest.raises(SourceReadError, match="device not ready"):
            list(NdjsonRecordSource(io.BufferedReader(BrokenStream())))


# ============================================================
# CSV
# ============================================================


class TestCsvRecordSource:
    """CsvRecordSource 测试."""

    def test_rows_keyed_by_header(self) -> None:
        """测试每行转换为以表头为键的对象."""
        stream = io.BytesIO(b"id,name\n1,Alice\n2,Bob\n")
        records = list(CsvRecordSource(stream))
        assert records == [{"id": "1", "name": "Alice"}, {"id": "2", "name": "Bob"}]

    def test_wrong_column_count_is_reported(self) -> None:
        """测试列数不一致的行被跳过并上报."""
        stream = io.BytesIO(b"id,name\n1,Alice\n2,Bob,extra\n3,Carol\n")
        errors, on_error = _collect_errors()
        records = list(CsvRecordSource(stream, on_error=on_error))
        assert [r["id"] for r in records] == ["1", "3"]
        assert len(errors) == 1
        assert errors[0].line_number == 3

    def test_one_malformed_row_among_hundred(self) -> None:
        """测试 100 行中 1 行列数错误时产生 99 条记录和 1 个解析错误."""
        rows = [f"{i},name-{i}" for i in range(100)]
        rows[42] = "42,name-42,unexpected"
        stream = io.BytesIO(("id,name\n" + "\n".join(rows) + "\n").encode())
        errors, on_error = _collect_errors()

        records = list(CsvRecordSource(stream, on_error=on_error))

        assert len(records) == 99
        assert len(errors) == 1

    def test_invalid_utf8_row_is_reported(self) -> None:
        """测试无法解码的行被跳过并上报，后续行继续读取."""
        stream = io.BytesIO(b"id,name\n1,a\n2,\xff\xfe\n3,c\n")
        errors, on_error = _collect_errors()
        records = list(CsvRecordSource(stream, on_error=on_error))
        assert records == [{"id": "1", "name": "a"}, {"id": "3", "name": "c"}]
        assert [e.line_number for e in errors] == [3]

    def test_line_numbers_after_undecodable_row(self) -> None:
        """测试跳过无法解码的行后，列数错误仍报告物理行号."""
        stream = io.BytesIO(b"id,name\n\xff,x\n2,b,extra\n3,c\n")
        errors, on_error = _collect_errors()
        records = list(CsvRecordSource(stream, on_error=on_error))
        assert records == [{"id": "3", "name": "c"}]
        assert [e.line_number for e in errors] == [2, 3]

    def test_truncated_multibyte_at_end(self) -> None:
        """测试末尾不完整的多字节字符作为解析错误上报."""
        stream = io.BytesIO(b"id,name\n1,a\n2,\xe4")
        errors, on_error = _collect_errors()
        records = list(CsvRecordSource(stream, on_error=on_error))
        assert records == [{"id": "1", "name": "a"}]
        assert [e.line_number for e in errors] == [3]

    def test_quoted_fields_and_utf8(self) -> None:
        """测试带引号的字段（含逗号、换行）与 UTF-8 内容."""
        stream = io.BytesIO('city,note\n北京,"a, b"\n上海,"line1\nline2"\n'.encode())
        records = list(CsvRecordSource(stream))
        assert records == [
            {"city": "北京", "note": "a, b"},
            {"city": "上海", "note": "line1\nline2"},
        ]

    def test_bom_is_stripped_from_header(self) -> None:
        """测试表头中的 UTF-8 BOM 被去除."""
        stream = io.BytesIO(b"\xef\xbb\xbfid,name\n1,Alice\n")
        records = list(CsvRecordSource(stream))
        assert records == [{"id": "1", "name": "Alice"}]

    def test_empty_stream(self) -> None:
        """测试空输入不产生记录."""
        assert list(CsvRecordSource(io.BytesIO(b""))) == []

    def test_blank_rows_ignored(self) -> None:
        """测试空白行被忽略."""
        stream = io.BytesIO(b"id\n1\n\n2\n")
        assert list(CsvRecordSource(stream)) == [{"id": "1"}, {"id": "2"}]


class TestOpenRecordSource:
    """open_record_source 工厂测试."""

    def test_ndjson(self) -> None:
        """测试 NDJSON 格式."""
        source = open_record_source(io.BytesIO(b""), InputFormat.NDJSON)
        assert isinstance(source, NdjsonRecordSource)

    def test_csv(self) -> None:
        """测试 CSV 格式."""
        source = open_record_source(io.BytesIO(b""), InputFormat.CSV)
        assert isinstance(source, CsvRecordSource)

    @pytest.mark.parametrize(
        ("extension", "expected"),
        [
            (".ndjson", InputFormat.NDJSON),
            (".jsonl", InputFormat.NDJSON),
            (".JSON", InputFormat.NDJSON),
            ("csv", InputFormat.CSV),
            (".txt", None),
        ],
    )
    def test_format_from_extension(self, extension, expected) -> None:
        """测试根据扩展名推断格式."""
        assert InputFormat.from_extension(extension) == expected
