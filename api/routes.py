from flask import Blueprint, current_app, jsonify

bp = Blueprint('api', __name__, url_prefix='/api')


def _service():
    return current_app.extensions['market_data']


@bp.get('/health')
def health():
    return {'status': 'ok', 'cacheEntries': len(_service().cache)}


@bp.get('/stocks/overview/<symbol>')
def overview(symbol):
    return jsonify(_service().overview(symbol))


@bp.get('/stocks/time-series/<symbol>', defaults={'range_': None})
@bp.get('/stocks/time-series/<symbol>/<range_>')
def time_series(symbol, range_):
    return jsonify(_service().time_series(symbol, range_))


@bp.get('/stocks/gainers')
def gainers():
    return jsonify(_service().top_gainers())


@bp.get('/stocks/losers')
def losers():
    return jsonify(_service().top_losers())


@bp.get('/stocks/logo/<symbol>')
def logo(symbol):
    return jsonify(_service().company_logo(symbol))
