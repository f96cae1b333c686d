import pytest

from controller._source import get_line, get_lines, read_lines, source_context


@pytest.fixture
def five_lines(tmp_path):
    path = tmp_path / 'five.py'
    path.write_text('a\nb\nc\nd\ne\n')
    return str(path)


class TestSourceContext:

    def test_window_is_clipped_at_file_edges(self, five_lines):
        pre, line, post = source_context(five_lines, 3, 3)
        assert pre == ['a', 'b']
        assert line == 'c'
        assert post == ['d', 'e']

    def test_full_window(self, tmp_path):
        path = tmp_path / 'ten.py'
        path.write_text(''.join(f'line{i}\n' for i in range(1, 11)))

        pre, line, post = source_context(str(path), 5, 2)
        assert pre == ['line3', 'line4']
        assert line == 'line5'
        assert post == ['line6', 'line7']

    def test_first_line_has_no_pre_context(self, five_lines):
        assert source_context(five_lines, 1, 3) == ([], 'a', ['b', 'c', 'd'])

    def test_last_line_has_no_post_context(self, five_lines):
        assert source_context(five_lines, 5, 3) == (['b', 'c', 'd'], 'e', [])

    def test_missing_file(self, tmp_path):
        missing = str(tmp_path / 'nope.py')
        assert source_context(missing, 3, 3) == ([], None, [])

    @pytest.mark.parametrize('path', [None, ''])
    def test_no_path(self, path):
        assert source_context(path, 3, 3) == ([], None, [])

    @pytest.mark.parametrize('lineno', [None, 0, -4])
    def test_invalid_line(self, five_lines, lineno):
        assert source_context(five_lines, lineno, 3) == ([], None, [])

    def test_line_past_end_of_file(self, five_lines):
        assert source_context(five_lines, 40, 3) == ([], None, [])


class TestGetLines:

    def test_trailing_whitespace_is_stripped(self, tmp_path):
        path = tmp_path / 'ws.py'
        path.write_text('x = 1   \n\ty = 2\t\n')
        assert get_lines(str(path), 1, 2) == ['x = 1', '\ty = 2']

    def test_start_below_one(self, five_lines):
        assert get_lines(five_lines, 0, 3) == []

    def test_count_is_clipped(self, five_lines):
        assert get_lines(five_lines, 4, 10) == ['d', 'e']

    def test_start_after_end(self, five_lines):
        assert get_lines(five_lines, 6, 3) == []

    def test_unreadable_file(self, tmp_path):
        # a directory cannot be read as a source file
        assert get_lines(str(tmp_path), 1, 3) == []

    def test_get_line(self, five_lines):
        assert get_line(five_lines, 2) == 'b'
        assert get_line(five_lines, 9) is None
        assert get_line(five_lines, None) is None


class TestReadLines:

    def test_relative_path_is_not_searched_on_sys_path(self, tmp_path,
                                                       monkeypatch):
        monkeypatch.chdir(tmp_path)
        # exists under the stdlib on sys.path, not under the cwd
        assert get_lines('json/__init__.py', 1, 3) == []
        assert source_context('json/__init__.py', 1, 3) == ([], None, [])

    def test_relative_path_under_cwd(self, tmp_path, monkeypatch):
        (tmp_path / 'job.py').write_text('run()\n')
        monkeypatch.chdir(tmp_path)
        assert get_line('job.py', 1) == 'run()'

    def test_changes_on_disk_are_seen(self, tmp_path):
        path = tmp_path / 'edited.py'
        path.write_text('old1\n')
        assert get_lines(str(path), 1, 1) == ['old1']

        path.write_text('new1\n')
        assert get_lines(str(path), 1, 1) == ['new1']

    def test_crlf_line_endings(self, tmp_path):
        path = tmp_path / 'dos.py'
        path.write_bytes(b'a = 1\r\nb = 2\r\n')
        assert read_lines(str(path)) == ['a = 1\n', 'b = 2\n']

    def test_undecodable_bytes_are_replaced(self, tmp_path):
        path = tmp_path / 'latin.py'
        path.write_bytes(b'name = "caf\xe9"\n')
        assert get_line(str(path), 1) == 'name = "caf\ufffd"'
