from datetime import date

from family_budget.aggregation import aggregate, aggregate_transactions, build_dashboard
from family_budget.config import TargetLineMode
from family_budget.models import CategoryConfig, Transaction, Window
from family_budget.visualization import (
    create_category_charts,
    create_cumulative_chart,
    create_income_expense_chart,
    create_transaction_chart,
)

WINDOW = Window.for_year(2024)


def _transactions():
    return [
        Transaction(date(2024, 1, 5), 'REWE', -40, 'Groceries'),
        Transaction(date(2024, 2, 5), 'REWE', -50, 'Groceries'),
        Transaction(date(2024, 3, 5), 'REWE', -60, 'Groceries'),
        Transaction(date(2024, 3, 25), 'Salary', 2000, 'income'),
    ]


def test_cumulative_chart_segments_and_target():
    result = aggregate(_transactions(), 'Groceries', WINDOW, target=1200,
                       target_line_mode=TargetLineMode.LINEAR)
    fig = create_cumulative_chart(result, WINDOW, 'Groceries')

    segments = [trace for trace in fig.data if trace.mode == 'lines' and trace.name == 'Groceries (YTD)']
    assert len(segments) == 11
    assert [trace.line.dash for trace in segments[:3]] == ['solid', 'solid', 'dash']
    target = [trace for trace in fig.data if trace.name == 'Target Progress']
    assert len(target) == 1
    assert target[0].line.dash == 'dash'
    assert list(target[0].y)[-1] == 1200


def test_cumulative_chart_without_data():
    result = aggregate([], 'Groceries', WINDOW)
    fig = create_cumulative_chart(result, WINDOW, 'Groceries')
    assert len(fig.data) == 0
    assert fig.layout.title.text == 'No data to display'


def test_income_expense_chart():
    category_config = CategoryConfig(categories=('income', 'Groceries', 'Other'))
    dashboard = build_dashboard(_transactions(), category_config, WINDOW,
                                target_line_mode=TargetLineMode.LINEAR)
    fig = create_income_expense_chart(dashboard)

    names = {trace.name for trace in fig.data}
    assert names == {'Total Expenses', 'Total Income'}

    charts = create_category_charts(dashboard)
    assert list(charts) == ['Groceries', 'Other']
    assert charts['Other'].layout.title.text == 'No data to display'


def test_transaction_chart_hover_data():
    result = aggregate_transactions(_transactions(), 'Groceries', WINDOW)
    fig = create_transaction_chart(result, 'Groceries')

    trace = fig.data[0]
    assert list(trace.y) == [40, 90, 150]
    assert trace.customdata[0][0] == 'REWE'
    assert create_transaction_chart(aggregate_transactions([], 'Groceries'), 'Groceries').data == ()


def test_endpoint_target_trace_uses_transaction_dates():
    result = aggregate(_transactions(), 'Groceries', WINDOW, target=600,
                       target_line_mode=TargetLineMode.ENDPOINT)
    fig = create_cumulative_chart(result, WINDOW, 'Groceries')

    target = [trace for trace in fig.data if trace.name == 'Target Progress'][0]
    assert list(target.y) == [0.0, 600.0]
    assert len(target.x) == 2
