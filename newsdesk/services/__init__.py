# Services package.
#
#   news_service: NewsService, paginated reads and create/update/delete of
#                 News with on-the-fly creation of missing authors and tags
#
# Services receive their repositories and mapper through the constructor;
# ``newsdesk.dependencies.get_news_service`` builds them per request on
# top of the ``get_db`` session, so the router layer owns the transaction.
