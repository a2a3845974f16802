import importlib.util
import json
from collections.abc import Hashable
from pathlib import Path

import pytest

from family_budget.models import CategoryConfig
from family_budget.template import TemplateError, load_template, parse_template

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SCRIPT_PATH = PROJECT_ROOT / 'scripts' / 'validate_template.py'


def _load_script():
    spec = importlib.util.spec_from_file_location('validate_template_test', SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _write(tmp_path, data):
    path = tmp_path / 'template.json'
    path.write_text(json.dumps(data), encoding='utf-8')
    return path


def test_parse_entry_list():
    category_config = parse_template({
        'categories': [
            {'name': 'income', 'patterns': ['Salary']},
            {'name': 'Groceries', 'patterns': [' REWE ', '', 'edeka'], 'target': 4800, 'remark': 'weekly shop'},
            {'name': 'Other'},
        ]
    })

    assert category_config.categories == ('income', 'Groceries', 'Other')
    assert category_config.patterns_for('Groceries') == ('rewe', 'edeka')
    assert category_config.patterns_for('income') == ('salary',)
    assert category_config.target_for('Groceries') == 4800.0
    assert category_config.target_for('Other') == 0.0
    assert category_config.remark_for('Groceries') == 'weekly shop'
    assert category_config.income_category == 'income'
    assert category_config.targetable_categories == ['Groceries', 'Other']


def test_parse_mapping_form():
    category_config = parse_template({
        'categories': ['Income', 'Groceries', 'Other'],
        'patterns': {'Groceries': ['rewe']},
        'targets': {'Groceries': 1200},
        'remarks': {'Other': 'misc'},
    })

    assert category_config.income_category == 'Income'
    assert category_config.expense_categories == ['Groceries', 'Other']
    assert category_config.target_for('Groceries') == 1200.0
    assert category_config.remark_for('Other') == 'misc'


def test_mapping_form_rejects_unknown_category():
    with pytest.raises(TemplateError, match='unknown categories'):
        parse_template({'categories': ['Groceries'], 'targets': {'Vacation': 100}})


@pytest.mark.parametrize('entry', [
    {'name': 'Groceries', 'target': -1},
    {'name': 'Groceries', 'target': 'lots'},
    {'name': '   '},
    {'name': 'Groceries', 'patterns': 'rewe'},
])
def test_invalid_entries_raise(entry):
    with pytest.raises(TemplateError):
        parse_template({'categories': [entry]})


def test_duplicate_categories_raise():
    with pytest.raises(TemplateError, match='Duplicate'):
        parse_template({'categories': [{'name': 'Groceries'}, {'name': 'Groceries'}]})


def test_two_income_categories_raise():
    with pytest.raises(TemplateError, match='income'):
        parse_template({'categories': ['income', 'Income']})


def test_empty_template_is_allowed():
    category_config = parse_template({'categories': []})
    assert category_config.categories == ()
    assert category_config.income_category is None


def test_category_config_is_not_hashable():
    category_config = CategoryConfig(categories=('Groceries',))
    assert not isinstance(category_config, Hashable)
    with pytest.raises(TypeError):
        hash(category_config)


def test_category_config_validates_keys():
    with pytest.raises(ValueError):
        CategoryConfig(categories=('Groceries',), remarks={'Vacation': 'x'})


def test_load_template_from_file(tmp_path):
    path = _write(tmp_path, {'categories': [{'name': 'Groceries', 'patterns': ['rewe']}]})
    assert load_template(path).categories == ('Groceries',)


def test_load_template_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_template(tmp_path / 'missing.json')


def test_bundled_template_imports():
    category_config = load_template(PROJECT_ROOT / 'data' / 'category_template.json')
    assert category_config.categories[0] == 'income'
    assert category_config.categories[-1] == 'Other'
    assert category_config.target_for('Groceries') == 6000.0


def test_validate_template_script(tmp_path, capsys):
    module = _load_script()
    good = _write(tmp_path, {'categories': [{'name': 'Groceries'}]})
    bad = tmp_path / 'bad.json'
    bad.write_text('{"categories": [{"name": "A", "target": -5}]}', encoding='utf-8')

    assert module.validate_template(good) is None
    assert 'must be >= 0' in module.validate_template(bad)
    assert module.main([good]) == 0
    assert module.main([good, bad]) == 1
    assert 'bad.json' in capsys.readouterr().out
