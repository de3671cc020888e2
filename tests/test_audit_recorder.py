"""
Unit tests for the audit recorder
"""

import json
import logging

import pytest
from unittest.mock import patch

from browser_hub.utils.audit_recorder import REDACTED, AuditRecorder


def _read_lines(path):
    return [json.loads(line) for line in path.read_text(encoding='utf-8').splitlines()]


class TestRecord:
    """Test record creation and persistence"""

    def test_record_fields(self, audit):
        record = audit.record('navigate', 'multi-browser', True, duration_ms=12.0, url='https://example.com')

        assert record.action == 'navigate'
        assert record.backend == 'multi-browser'
        assert record.success is True
        assert record.url == 'https://example.com'
        assert record.duration_ms == 12.0
        assert record.id
        assert record.timestamp.tzinfo is not None
        assert audit.records == [record]

    def test_ids_are_unique(self, audit):
        first = audit.record('click', 'multi-browser', True)
        second = audit.record('click', 'multi-browser', True)
        assert first.id != second.id

    def test_json_lines_written(self, tmp_path):
        """Test every record goes to combined and failures also to error"""
        recorder = AuditRecorder(log_dir=str(tmp_path), console=False)

        recorder.record('navigate', 'multi-browser', True, duration_ms=5.0, url='https://example.com')
        recorder.record('click', 'multi-browser', False, duration_ms=1.0, error='no such element')

        combined = _read_lines(tmp_path / 'combined.jsonl')
        errors = _read_lines(tmp_path / 'error.jsonl')

        assert [line['action'] for line in combined] == ['navigate', 'click']
        assert len(errors) == 1
        assert errors[0]['error'] == 'no such element'
        assert errors[0]['success'] is False
        assert combined[0]['url'] == 'https://example.com'
        assert 'error' not in combined[0]

    def test_log_dir_created(self, tmp_path):
        target = tmp_path / 'nested' / 'audit'
        AuditRecorder(log_dir=str(target), console=False)
        assert target.is_dir()

    def test_storage_failure_does_not_raise(self, tmp_path, caplog):
        """Test an unwritable log directory warns once and keeps records in memory"""
        blocker = tmp_path / 'not_a_dir'
        blocker.write_text('occupied')

        with caplog.at_level(logging.WARNING, logger='browser_hub.utils.audit_recorder'):
            recorder = AuditRecorder(log_dir=str(blocker), console=False)
            recorder.record('navigate', 'multi-browser', True)
            recorder.record('click', 'multi-browser', False, error='boom')

        assert len(recorder.records) == 2
        warnings = [r for r in caplog.records if r.name == 'browser_hub.utils.audit_recorder']
        assert len(warnings) == 1


class TestRecordError:
    """Test recording failures outside timed actions"""

    def test_exception_keeps_stack(self, audit):
        try:
            raise RuntimeError('launch exploded')
        except RuntimeError as e:
            record = audit.record_error('initialize', e, backend='headless-chromium')

        assert record.success is False
        assert record.error == 'launch exploded'
        assert 'RuntimeError' in record.stack
        assert 'launch exploded' in record.stack
        assert record.backend == 'headless-chromium'

    def test_string_error(self, audit):
        record = audit.record_error('close', 'socket closed')

        assert record.error == 'socket closed'
        assert record.stack is None
        assert record.backend == 'unknown'

    def test_empty_exception_uses_type_name(self, audit):
        record = audit.record_error('close', TimeoutError())
        assert record.error == 'TimeoutError'


class TestSanitization:
    """Test redaction of sensitive metadata"""

    def test_sensitive_keys_redacted(self, audit):
        record = audit.record('login', 'multi-browser', True, metadata={
            'password': 'hunter2',
            'apiKey': 'abc',
            'url': 'https://example.com',
        })

        assert record.metadata['password'] == REDACTED
        assert record.metadata['apiKey'] == REDACTED
        assert record.metadata['url'] == 'https://example.com'

    @pytest.mark.parametrize('selector', ['#password', 'input[name=username]', '#login-email'])
    def test_text_redacted_for_credential_fields(self, audit, selector):
        """Test text typed into credential-like fields is hidden"""
        record = audit.record('type', 'multi-browser', True, metadata={'selector': selector, 'text': 'secret'})

        assert record.metadata['text'] == REDACTED
        assert record.metadata['selector'] == selector

    def test_text_kept_for_ordinary_fields(self, audit):
        record = audit.record('type', 'multi-browser', True, metadata={'selector': '#search', 'text': 'shoes'})
        assert record.metadata['text'] == 'shoes'

    def test_nested_locator_checked(self, audit):
        record = audit.record('type', 'protocol-driver', True, metadata={
            'locator': {'id': 'password-field'},
            'text': 'secret',
        })
        assert record.metadata['text'] == REDACTED

    def test_lists_of_dicts_redacted(self, audit):
        """Test credentials inside list entries are redacted too"""
        record = audit.record('fill_form', 'multi-browser', True, metadata={
            'fields': [
                {'selector': '#user', 'password': 'hunter2'},
                {'selector': '#note', 'text': 'hello'},
                [b'abc'],
            ],
        })

        fields = record.metadata['fields']
        assert fields[0]['password'] == REDACTED
        assert fields[1]['text'] == 'hello'
        assert fields[2] == ['<3 bytes>']

    def test_non_string_keys(self, audit):
        record = audit.record('screenshot', 'multi-browser', True, metadata={
            'options': {1: 'first', 'clip': {'x': 0}},
        })
        assert record.metadata['options'] == {1: 'first', 'clip': {'x': 0}}

    def test_bytes_summarized(self, audit):
        record = audit.record('screenshot', 'multi-browser', True, metadata={'image': b'12345'})
        assert record.metadata['image'] == '<5 bytes>'

    def test_env_secret_values_redacted(self):
        """Test values of *_PASSWORD / *_TOKEN variables are redacted anywhere"""
        with patch.dict('os.environ', {'SITE_PASSWORD': 'pa55word', 'CI_TOKEN': 'tok-123'}, clear=True):
            recorder = AuditRecorder(log_dir=None, console=False)

        record = recorder.record('type', 'multi-browser', True, metadata={
            'selector': '#comment',
            'text': 'pa55word',
            'nested': {'value': 'tok-123'},
        })

        assert record.metadata['text'] == REDACTED
        assert record.metadata['nested']['value'] == REDACTED

    def test_persisted_record_is_sanitized(self, tmp_path):
        recorder = AuditRecorder(log_dir=str(tmp_path), console=False)
        recorder.record('type', 'multi-browser', True, metadata={'selector': '#password', 'text': 'hunter2'})

        content = (tmp_path / 'combined.jsonl').read_text(encoding='utf-8')
        assert 'hunter2' not in content


class TestConsoleAndSummary:
    """Test console mirroring and run summary"""

    def test_console_mirror(self, caplog):
        recorder = AuditRecorder(log_dir=None, console=True)

        with caplog.at_level(logging.INFO, logger='browser_hub.audit'):
            recorder.record('navigate', 'multi-browser', True, duration_ms=7.0, url='https://example.com')
            recorder.record('click', 'multi-browser', False, error='not found')

        messages = [(r.levelno, r.getMessage()) for r in caplog.records if r.name == 'browser_hub.audit']
        assert messages[0] == (logging.INFO, '[multi-browser] navigate https://example.com ok in 7ms')
        assert messages[1][0] == logging.ERROR
        assert 'not found' in messages[1][1]

    def test_console_disabled(self, audit, caplog):
        with caplog.at_level(logging.INFO, logger='browser_hub.audit'):
            audit.record('navigate', 'multi-browser', True)
        assert not [r for r in caplog.records if r.name == 'browser_hub.audit']

    def test_summary(self, audit):
        audit.record('navigate', 'multi-browser', True)
        audit.record('navigate', 'multi-browser', False, error='x')
        audit.record('click', 'multi-browser', True)

        assert audit.summary() == {
            'total': 3,
            'succeeded': 2,
            'failed': 1,
            'by_action': {'navigate': 2, 'click': 1},
        }
