from logging import getLogger

LOG = getLogger('controller')
