import matplotlib.pyplot as plt
import numpy as np



def plot_markers(markers, ax):
    """
    Scatter the cube centers of every non-empty level on a 3D axis.
    Larger cubes get larger dots; per-cube colors are used when present.
    """
    for marker in markers:
        if len(marker.points) == 0:
            continue
        colors = marker.colors if len(marker.colors) else np.tile(marker.color, (len(marker.points), 1))
        ax.scatter(marker.points[:, 0], marker.points[:, 1], marker.points[:, 2],
                   c=colors, marker='s', s=4 * 2 ** marker.id, label=f'level {marker.id}')
    ax.set_xlabel('X')
    ax.set_ylabel('Y')
    ax.set_zlabel('Z')


def show_markers(markers, title='Occupied cells'):
    fig = plt.figure(figsize=(8, 8))
    ax = fig.add_subplot(projection='3d')
    plot_markers(markers, ax)
    ax.set_title(title)
    ax.legend()
    plt.tight_layout()
    plt.show()
