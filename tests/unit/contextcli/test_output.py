import io

import pyperclip
import pytest
from pytest_mock import MockerFixture

from contextcli import output
from contextcli.output import Sink, deliver


@pytest.mark.unit
def test_stdout_skips_clipboard(mocker: MockerFixture) -> None:
    copy = mocker.patch.object(output.pyperclip, "copy")
    stream = io.StringIO()

    sink = deliver("# doc", use_stdout=True, stream=stream, log=mocker.Mock())

    assert sink is Sink.STREAM
    assert stream.getvalue() == "# doc\n"
    copy.assert_not_called()


@pytest.mark.unit
def test_clipboard_receives_document(mocker: MockerFixture) -> None:
    copy = mocker.patch.object(output.pyperclip, "copy")
    stream = io.StringIO()

    sink = deliver("# doc\n", use_stdout=False, stream=stream, log=mocker.Mock())

    assert sink is Sink.CLIPBOARD
    copy.assert_called_once_with("# doc\n")
    assert stream.getvalue() == ""


@pytest.mark.unit
def test_clipboard_failure_falls_back_to_stream(mocker: MockerFixture) -> None:
    mocker.patch.object(output.pyperclip, "copy", side_effect=pyperclip.PyperclipException("no clipboard"))
    stream = io.StringIO()
    log = mocker.Mock()

    sink = deliver("# doc\n", use_stdout=False, stream=stream, log=log)

    assert sink is Sink.STREAM
    assert stream.getvalue() == "# doc\n"
    log.error.assert_called_once()
