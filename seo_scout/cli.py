#!/usr/bin/env python3
"""
Точка входа для запуска краулера SeoScout через командную строку.

Команды:
  crawl URL   Обойти сайт и вывести/сохранить отчёт
  page URL    Загрузить и разобрать одну страницу
  config      Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stderr, если не указан)
  --log-format FORMAT Формат логирования

Команда crawl опции:
  --budget INT          Макс. число страниц (override max_pages)
  --json PATH           Сохранить JSON-отчёт в файл
  --html PATH           Сохранить HTML-отчёт в файл
  --template DIR        Папка с Jinja2-шаблоном report.html.j2
  --pretty              Преформатировать JSON-вывод (отступ 2)
  --crawl-timeout SEC   Таймаут всего обхода (секунд)

Пример:
  seo-scout crawl example.com --budget 20 --json report.json --pretty
"""
import asyncio
import sys
from pathlib import Path

import click

from seo_scout import __version__
from seo_scout.config import load_config
from seo_scout.engine import start_crawl, start_page_audit
from seo_scout.logger import DEFAULT_FORMAT, configure
from seo_scout.report.html_report import render_html
from seo_scout.report.json_report import render_json, result_to_json

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SeoScout, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--log-level', 'log_level',
    default='WARNING', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stderr, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд SeoScout CLI."""
    configure(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.option(
    '--budget', '-b', 'budget',
    type=click.IntRange(min=1),
    default=None,
    help='Макс. число страниц, включая главную (override max_pages)'
)
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт в файл'
)
@click.option(
    '--html', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить HTML-отчёт в файл'
)
@click.option(
    '--template', '-t', 'template_dir',
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Папка с Jinja2-шаблоном (по умолчанию встроенный)'
)
@click.option(
    '--pretty', is_flag=True,
    help='Преформатировать JSON-вывод (отступ 2)'
)
@click.option(
    '--crawl-timeout', 'crawl_timeout',
    type=float,
    default=None,
    help='Таймаут всего обхода (секунд)'
)
@click.pass_context
def crawl(ctx, url, budget, json_output, html_output, template_dir, pretty, crawl_timeout):
    """Обойти сайт начиная с URL и сгенерировать отчёты."""
    cfg = ctx.obj['config']
    click.echo(f'Starting crawl of {url}', err=True)
    try:
        result = asyncio.run(
            asyncio.wait_for(start_crawl(cfg, url, budget), timeout=crawl_timeout)
        )
    except asyncio.TimeoutError:
        print_error(f'Обход не завершён за {crawl_timeout} секунд')
    except Exception as e:
        print_error(f'Ошибка при обходе: {e}')

    # Без --json и --html отчёт печатается в stdout
    if not json_output and not html_output:
        click.echo(result_to_json(result, pretty=pretty))
        return

    if json_output:
        try:
            saved_json = render_json(result, json_output)
            click.echo(f'JSON report: {saved_json}')
        except Exception as e:
            print_error(f'Ошибка при сохранении JSON: {e}')

    if html_output:
        try:
            saved_html = render_html(result, html_output, template_dir)
            click.echo(f'HTML report: {saved_html}')
        except Exception as e:
            print_error(f'Ошибка при сохранении HTML: {e}')


@cli.command('page', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.option('--pretty', is_flag=True, help='Преформатировать JSON-вывод (отступ 2)')
@click.pass_context
def page(ctx, url, pretty):
    """Загрузить и разобрать одну страницу."""
    cfg = ctx.obj['config']
    try:
        content = asyncio.run(start_page_audit(cfg, url))
    except Exception as e:
        print_error(f'Ошибка при загрузке страницы: {e}')
    click.echo(result_to_json(content, pretty=pretty))
    if content.error:
        sys.exit(2)


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
