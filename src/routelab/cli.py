"""命令行接口模块。"""

import asyncio
import json
import logging

import click

from .common.config import load_settings
from .common.exceptions import RouteLabError
from .routes.amap import AmapClient, STRATEGY_DESCRIPTIONS
from .routes.database import bootstrap
from .routes.geometry import decode
from .routes.markers import MarkerStore
from .routes.normalizer import RoutePlanner
from .routes.search import RouteSearch
from .routes.store import RouteStore

logger = logging.getLogger(__name__)


def setup_logging():
    """设置日志配置。"""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(),
        ]
    )


def _echo_json(data):
    click.echo(json.dumps(data, ensure_ascii=False, indent=2, default=str))


def _parse_points(ctx, param, values):
    points = []
    for value in values:
        decoded = decode(value)
        if len(decoded) != 1:
            raise click.BadParameter(f'坐标格式应为 lng,lat: {value}')
        points.append(decoded[0])
    return points


def _run_with_db(settings, operation):
    """初始化数据库后执行 ``operation(db)``，结束时关闭连接。"""
    async def _main():
        db = await bootstrap(settings)
        try:
            return await operation(db)
        finally:
            await db.close()

    try:
        return asyncio.run(_main())
    except RouteLabError as e:
        logger.error(f"操作失败: {e.message}")
        raise click.ClickException(e.message)


@click.group()
@click.option('--database-url', default=None, help='数据库连接串（默认读取 ROUTELAB_DATABASE_URL）')
@click.pass_context
def cli(ctx, database_url):
    """Route-Lab 路线规划与管理工具。"""
    setup_logging()
    settings = load_settings()
    if database_url:
        settings.database_url = database_url
    ctx.obj = settings


@cli.command('init-db')
@click.pass_obj
def init_db(settings):
    """创建数据表并初始化默认账号。"""
    async def _noop(db):
        return None

    _run_with_db(settings, _noop)
    click.echo(f'数据库已初始化: {settings.database_url}')


@cli.command()
def strategies():
    """列出路径规划策略。"""
    _echo_json({str(int(key)): value for key, value in STRATEGY_DESCRIPTIONS.items()})


@cli.command('plan-route')
@click.option('--point', 'points', multiple=True, required=True, callback=_parse_points,
              help='路径点 lng,lat，按顺序给出起点、途经点、终点')
@click.option('--strategy', type=click.IntRange(0, 10), default=0, help='路径规划策略 0-10')
@click.option('--save', is_flag=True, help='保存规划结果')
@click.option('--name', help='保存时使用的路线名称')
@click.option('--city', default='', help='城市')
@click.option('--district', default='', help='区县')
@click.option('--created-by', default='system', help='创建人')
@click.pass_obj
def plan_route(settings, points, strategy, save, name, city, district, created_by):
    """调用高德API规划驾车路线。

    Examples:
        python -m routelab.cli plan-route \\
            --point 116.397,39.909 --point 116.407,39.919 --save --name 测试路线
    """
    client = AmapClient(settings.amap_api_key, settings.amap_base_url, settings.amap_timeout)
    try:
        plan = RoutePlanner(client).plan(points, strategy)
    except RouteLabError as e:
        logger.error(f"路径规划失败: {e.message}")
        raise click.ClickException(e.message)

    if not save:
        _echo_json(plan.to_dict())
        return
    if not name:
        raise click.UsageError('--save 需要同时提供 --name')

    fields = plan.to_record()
    fields.update(
        name=name,
        city=city,
        district=district,
        created_by=created_by,
        waypoints=[{'lng': p.lng, 'lat': p.lat} for p in points],
        start_lng=points[0].lng,
        start_lat=points[0].lat,
        end_lng=points[-1].lng,
        end_lat=points[-1].lat,
    )

    async def _save(db):
        return await RouteStore(db).create(fields)

    route = _run_with_db(settings, _save)
    _echo_json(route.to_dict())


@cli.command('list-routes')
@click.option('--page', type=int, default=1)
@click.option('--page-size', type=int, default=20)
@click.option('--type', 'route_type', default=None, help='按路线类型过滤')
@click.option('--name', 'name_contains', default=None, help='按名称包含过滤')
@click.pass_obj
def list_routes(settings, page, page_size, route_type, name_contains):
    """分页列出路线。"""
    async def _list(db):
        return await RouteStore(db).list_routes(page, page_size, route_type, name_contains)

    routes = _run_with_db(settings, _list)
    _echo_json([route.to_dict() for route in routes])


@cli.command('search-routes')
@click.option('--keyword', default='', help='在名称、描述、城市、区县、创建人中搜索')
@click.option('--page', type=int, default=1)
@click.option('--page-size', type=int, default=20)
@click.pass_obj
def search_routes(settings, keyword, page, page_size):
    """关键词搜索路线。"""
    async def _search(db):
        return await RouteSearch(db).search(keyword, page, page_size)

    _echo_json(_run_with_db(settings, _search).to_dict())


@cli.command('route-stats')
@click.pass_obj
def route_stats(settings):
    """按路线类型统计数量与里程。"""
    async def _stats(db):
        return await RouteStore(db).statistics()

    _echo_json(_run_with_db(settings, _stats))


@cli.command('list-markers')
@click.option('--route-id', type=int, required=True)
@click.pass_obj
def list_markers(settings, route_id):
    """列出路线上的标记点。"""
    async def _markers(db):
        return await MarkerStore(db).list_by_route(route_id)

    _echo_json([marker.to_dict() for marker in _run_with_db(settings, _markers)])


def main():
    """主函数。"""
    cli()


if __name__ == '__main__':
    cli()
